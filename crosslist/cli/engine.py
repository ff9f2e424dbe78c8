# crosslist/cli/engine.py
from typing import NamedTuple, Optional

from crosslist.core.config import Settings, get_settings
from crosslist.services.bulk import BulkOperationService
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.services.persistence import build_store
from crosslist.store import InventoryStore


class Engine(NamedTuple):
    settings: Settings
    store: InventoryStore
    lifecycle: ListingLifecycleService
    bulk: BulkOperationService


async def load_engine(settings: Optional[Settings] = None, store: Optional[InventoryStore] = None) -> Engine:
    """Load the inventory and wire the lifecycle and bulk services for a one-off command"""
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    await store.load()
    lifecycle = ListingLifecycleService(store)
    lifecycle.init_listing_dates()
    bulk = BulkOperationService(lifecycle, auto_relist_enabled=settings.AUTO_RELIST_ENABLED)
    return Engine(settings, store, lifecycle, bulk)
