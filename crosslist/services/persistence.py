# crosslist/services/persistence.py
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from crosslist.core.config import Settings
from crosslist.database import get_session_factory
from crosslist.models.item import ItemRecord
from crosslist.schemas.item import InventoryItem
from crosslist.store import InventoryStore

logger = logging.getLogger(__name__)

# Columns copied between the pydantic item and the SQLAlchemy record
ITEM_COLUMNS = (
    "sku", "name", "category", "condition", "notes", "price", "qty", "upc", "isbn",
    "images", "tags", "added", "platforms", "platform_status", "platform_listing_dates",
    "platform_listing_expiry", "last_relisted", "external_refs", "price_history",
)


class SqlItemBackend:
    """
    Loads and saves inventory items through an async SQLAlchemy session factory.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def load_items(self) -> List[InventoryItem]:
        async with self.session_factory() as session:
            result = await session.execute(select(ItemRecord).order_by(ItemRecord.created_at, ItemRecord.id))
            records = result.scalars().all()
            return [InventoryItem.model_validate(record, from_attributes=True) for record in records]

    async def save_items(self, items: List[InventoryItem]) -> None:
        if not items:
            return
        async with self.session_factory() as session:
            async with session.begin():
                for item in items:
                    record = await session.get(ItemRecord, item.id)
                    if record is None:
                        record = ItemRecord(id=item.id)
                        session.add(record)
                    self._copy_to_record(item, record)
        logger.debug(f"Persisted {len(items)} inventory items")

    @staticmethod
    def _copy_to_record(item: InventoryItem, record: ItemRecord) -> None:
        data = item.model_dump(mode="json")
        for column in ITEM_COLUMNS:
            setattr(record, column, data[column])
        # Date column wants a date object, not the JSON string
        record.added = item.added


def build_store(settings: Settings) -> InventoryStore:
    """SQL-backed store when DATABASE_URL is set, otherwise memory only."""
    if not settings.DATABASE_URL:
        logger.warning("DATABASE_URL not set; inventory is kept in memory only")
        return InventoryStore()
    return InventoryStore(backend=SqlItemBackend(get_session_factory()))
