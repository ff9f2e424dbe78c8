# tests/conftest.py
from datetime import date, timedelta

import pytest

from crosslist.core.config import Settings
from crosslist.schemas.item import InventoryItem
from crosslist.services.bulk import BulkOperationService
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.store import InventoryStore

TODAY = date(2024, 6, 1)


class FixedClock:
    """Controllable stand-in for date.today()"""

    def __init__(self, today: date = TODAY):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int) -> None:
        self.today += timedelta(days=days)


def make_item(item_id: str = "item-1", **fields) -> InventoryItem:
    data = {"id": item_id, "name": f"Item {item_id}", "qty": 1, "price": 25.0}
    data.update(fields)
    return InventoryItem(**data)


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        DATABASE_URL="",
        EBAY_ACCESS_TOKEN="ebay-test-token",
        ETSY_API_KEY="etsy-test-key",
        ETSY_ACCESS_TOKEN="etsy-test-token",
        ETSY_SHOP_ID="12345",
        SYNC_SCHEDULE_ENABLED=False,
        AUTO_RELIST_ENABLED=False,
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return InventoryStore()


@pytest.fixture
def lifecycle(store, clock):
    return ListingLifecycleService(store, clock=clock)


@pytest.fixture
def bulk(lifecycle):
    return BulkOperationService(lifecycle)


@pytest.fixture
def add_item(store):
    """Insert an item into the store and hand it back"""
    def _add(item_id: str = "item-1", **fields) -> InventoryItem:
        item = make_item(item_id, **fields)
        store.update(item)
        return item
    return _add
