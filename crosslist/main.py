# crosslist/main.py

import logging
import os
import subprocess
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Dict, Optional

from fastapi import FastAPI

from crosslist.core.config import Settings, get_settings
from crosslist.core.logging_config import configure_logging
from crosslist.database import dispose_engine
from crosslist.integrations.base import MarketplaceAdapter
from crosslist.integrations.setup import build_adapters, connect_adapters
from crosslist.routes import crosslist as crosslist_routes, health, platforms
from crosslist.scheduler import SyncScheduler
from crosslist.services.bulk import BulkOperationService
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.services.persistence import build_store
from crosslist.store import InventoryStore

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[Settings, ListingLifecycleService, InventoryStore], Dict[str, MarketplaceAdapter]]


def run_migrations() -> None:
    """alembic upgrade head, when RUN_MIGRATIONS=true"""
    if os.getenv("RUN_MIGRATIONS", "false").lower() != "true":
        return
    logger.info("Running database migrations...")
    result = subprocess.run(["alembic", "upgrade", "head"], capture_output=True, text=True)
    if result.returncode == 0:
        logger.info("Migrations completed successfully")
    else:
        logger.error(f"Migration failed: {result.stderr}")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[InventoryStore] = None,
    adapter_factory: AdapterFactory = build_adapters,
    clock: Optional[Callable[[], date]] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        run_migrations()

        app_store = store if store is not None else build_store(settings)
        await app_store.load()

        lifecycle = ListingLifecycleService(app_store, clock=clock)
        bulk = BulkOperationService(lifecycle, auto_relist_enabled=settings.AUTO_RELIST_ENABLED)
        adapters = adapter_factory(settings, lifecycle, app_store)

        # Listings loaded without dates get one, then anything already past expiry is marked
        lifecycle.init_listing_dates()
        lifecycle.sweep_expired()
        await app_store.save()

        scheduler = SyncScheduler(settings, lifecycle, bulk, app_store, adapters)

        app.state.settings = settings
        app.state.store = app_store
        app.state.lifecycle = lifecycle
        app.state.bulk = bulk
        app.state.adapters = adapters
        app.state.scheduler = scheduler if settings.SYNC_SCHEDULE_ENABLED else None

        await connect_adapters(adapters)
        if settings.SYNC_SCHEDULE_ENABLED:
            scheduler.start()
        else:
            logger.info("Scheduler is disabled. Set SYNC_SCHEDULE_ENABLED=true to enable")

        try:
            yield
        finally:
            scheduler.stop()
            await app_store.save()
            await dispose_engine()

    app = FastAPI(
        title="Crosslist Engine",
        description="Listing lifecycle and marketplace sync for crosslisted inventory",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    app.include_router(crosslist_routes.router)
    app.include_router(platforms.router)
    app.include_router(health.router)
    return app


app = create_app()
