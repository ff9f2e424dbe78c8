"""
In-memory item repository with dirty tracking.

The lifecycle engine reads and mutates items synchronously through
ItemRepository. Writes are made durable later by an awaited save(), which
flushes only the items marked dirty since the last successful save. In-memory
state is the source of truth between saves.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Protocol, Set

from crosslist.core.exceptions import ItemNotFoundError
from crosslist.schemas.item import InventoryItem

logger = logging.getLogger(__name__)


class ItemBackend(Protocol):
    """Durable storage behind the in-memory store."""

    async def load_items(self) -> List[InventoryItem]:
        ...

    async def save_items(self, items: List[InventoryItem]) -> None:
        ...


class ItemRepository(ABC):

    @abstractmethod
    def find(self, item_id: str) -> Optional[InventoryItem]:
        """Item by id, or None"""

    @abstractmethod
    def all(self) -> List[InventoryItem]:
        """Every item, in insertion order"""

    @abstractmethod
    def update(self, item: InventoryItem) -> None:
        """Insert or replace an item and mark it dirty"""

    @abstractmethod
    def mark_dirty(self, item_id: str) -> None:
        """Flag an item for the next save"""

    @abstractmethod
    async def save(self) -> int:
        """Flush dirty items, returning how many were written"""

    def get(self, item_id: str) -> InventoryItem:
        item = self.find(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item


class InventoryStore(ItemRepository):

    def __init__(self, items: Optional[Iterable[InventoryItem]] = None, backend: Optional[ItemBackend] = None):
        self._items: Dict[str, InventoryItem] = {}
        self._dirty: Set[str] = set()
        self.backend = backend
        for item in items or []:
            self._items[item.id] = item

    def find(self, item_id: str) -> Optional[InventoryItem]:
        return self._items.get(item_id)

    def all(self) -> List[InventoryItem]:
        return list(self._items.values())

    def update(self, item: InventoryItem) -> None:
        self._items[item.id] = item
        self.mark_dirty(item.id)

    def mark_dirty(self, item_id: str) -> None:
        self._dirty.add(item_id)

    @property
    def dirty_ids(self) -> Set[str]:
        return set(self._dirty)

    def find_by_sku(self, sku: Optional[str]) -> Optional[InventoryItem]:
        if not sku:
            return None
        return next((i for i in self._items.values() if i.sku and i.sku == sku), None)

    def find_by_external_ref(self, platform: str, key: str, value) -> Optional[InventoryItem]:
        if value is None or value == "":
            return None
        value = str(value)
        for item in self._items.values():
            ref = item.external_refs.get(platform) or {}
            if ref.get(key) is not None and str(ref.get(key)) == value:
                return item
        return None

    async def load(self) -> int:
        """Replace in-memory items with the backend's contents."""
        if self.backend is None:
            return len(self._items)
        items = await self.backend.load_items()
        self._items = {item.id: item for item in items}
        self._dirty.clear()
        logger.info(f"Loaded {len(self._items)} inventory items")
        return len(self._items)

    async def save(self) -> int:
        """
        Best-effort flush of dirty items.

        A failed write is logged and the dirty set is kept so the next save
        retries it.
        """
        if not self._dirty:
            return 0

        dirty = set(self._dirty)
        items = [self._items[i] for i in dirty if i in self._items]

        if self.backend is not None:
            try:
                await self.backend.save_items(items)
            except Exception as e:
                logger.error(f"Failed to save {len(items)} items, will retry on next save: {e}")
                return 0

        self._dirty -= dirty
        logger.debug(f"Saved {len(items)} items")
        return len(items)
