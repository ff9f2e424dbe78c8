# crosslist/services/price_history.py
import logging
from datetime import datetime, timezone
from typing import List, Optional

from crosslist.core.enums import PriceSource
from crosslist.schemas.item import InventoryItem, PriceHistoryEntry
from crosslist.store import ItemRepository

logger = logging.getLogger(__name__)

MAX_PRICE_HISTORY = 50


class PriceHistoryService:
    """
    Keeps the last MAX_PRICE_HISTORY price points on each item:
    manual edits, bulk repricing and realised sale prices.
    """

    def __init__(self, store: ItemRepository):
        self.store = store

    def log_price_change(self, item_id: str, new_price: float, source: PriceSource = PriceSource.MANUAL) -> None:
        item = self.store.get(item_id)
        self._append(item, PriceHistoryEntry(
            date=datetime.now(timezone.utc),
            price=new_price,
            source=source,
        ))

    def log_sale_price(self, item_id: str, sale_price: float, platform: str) -> None:
        item = self.store.get(item_id)
        self._append(item, PriceHistoryEntry(
            date=datetime.now(timezone.utc),
            price=sale_price,
            source=PriceSource.SOLD,
            platform=platform,
        ))

    def get_history(self, item_id: str, source: Optional[PriceSource] = None) -> List[PriceHistoryEntry]:
        item = self.store.get(item_id)
        if source is None:
            return list(item.price_history)
        return [entry for entry in item.price_history if entry.source == source]

    def _append(self, item: InventoryItem, entry: PriceHistoryEntry) -> None:
        item.price_history.append(entry)
        if len(item.price_history) > MAX_PRICE_HISTORY:
            del item.price_history[:-MAX_PRICE_HISTORY]
        self.store.mark_dirty(item.id)
        logger.debug(f"Logged {entry.source.value} price {entry.price} for item {item.id}")
