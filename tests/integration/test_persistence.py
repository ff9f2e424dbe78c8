# tests/integration/test_persistence.py
import pytest
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from crosslist.core.enums import ListingStatus, PriceSource
from crosslist.database import create_engine, create_tables
from crosslist.models.item import ItemRecord
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.services.persistence import SqlItemBackend
from crosslist.store import InventoryStore
from tests.conftest import FixedClock, make_item


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'crosslist.db'}")
    await create_tables(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


"""
1. Round trip through the SQL backend
"""

@pytest.mark.asyncio
async def test_items_survive_a_restart(session_factory):
    store = InventoryStore(backend=SqlItemBackend(session_factory))
    store.update(make_item(
        "a", sku="SKU-A", qty=2, added=date(2024, 1, 15), images=["https://img/1.jpg"],
        platforms=["eBay", "Etsy"], external_refs={"eBay": {"sku": "SKU-A", "order_lines": ["o:1"]}},
    ))
    store.update(make_item("b"))
    lifecycle = ListingLifecycleService(store, clock=FixedClock())
    lifecycle.init_listing_dates()
    lifecycle.record_sale("a", "eBay", price=30.0)

    assert await store.save() == 2

    reloaded = InventoryStore(backend=SqlItemBackend(session_factory))
    assert await reloaded.load() == 2
    item = reloaded.get("a")
    assert item.qty == 1
    assert item.added == date(2024, 1, 15)
    assert item.platform_status == {"eBay": ListingStatus.SOLD, "Etsy": ListingStatus.ACTIVE}
    assert item.platform_listing_dates == {"eBay": date(2024, 1, 15), "Etsy": date(2024, 1, 15)}
    assert item.platform_listing_expiry["Etsy"] == date(2024, 5, 14)
    assert item.external_refs["eBay"]["order_lines"] == ["o:1"]
    assert item.price_history[0].source is PriceSource.SOLD
    assert item.price_history[0].platform == "eBay"


@pytest.mark.asyncio
async def test_save_updates_existing_rows(session_factory):
    store = InventoryStore([make_item("a", platforms=["eBay"])], backend=SqlItemBackend(session_factory))
    store.mark_dirty("a")
    await store.save()

    lifecycle = ListingLifecycleService(store, clock=FixedClock())
    lifecycle.set_status("a", "eBay", ListingStatus.DELISTED)
    await store.save()

    async with session_factory() as session:
        records = (await session.execute(select(ItemRecord))).scalars().all()
    assert len(records) == 1
    assert records[0].platform_status == {"eBay": "delisted"}


@pytest.mark.asyncio
async def test_only_dirty_items_are_written(session_factory):
    store = InventoryStore([make_item("a"), make_item("b")], backend=SqlItemBackend(session_factory))
    store.mark_dirty("b")

    assert await store.save() == 1
    assert store.dirty_ids == set()

    async with session_factory() as session:
        ids = (await session.execute(select(ItemRecord.id))).scalars().all()
    assert ids == ["b"]
