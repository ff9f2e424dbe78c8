"""
Crosslisting endpoints: expiry queries, listing health, manual listing
actions, bulk operations and the auto-relist toggle.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from crosslist.core.config import Settings
from crosslist.core.exceptions import BaseServiceError
from crosslist.core.expiry_rules import PLATFORM_EXPIRY_RULES
from crosslist.dependencies import get_app_settings, get_bulk, get_lifecycle, get_store, http_error
from crosslist.integrations.events import SaleEvent
from crosslist.schemas.crosslist import (
    AutoRelistSettings,
    BulkPriceRequest,
    BulkPriceResult,
    BulkResult,
    FleetStats,
    ListingDateUpdate,
    ListingExpiry,
    ListingHealth,
    SaleResult,
    StatusUpdate,
    SweepResult,
)
from crosslist.schemas.item import InventoryItem
from crosslist.services.bulk import BulkOperationService
from crosslist.services.health import fleet_stats, listing_health
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.store import InventoryStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/crosslist", tags=["crosslist"])


# Queries

@router.get("/expired", response_model=List[ListingExpiry])
async def expired_listings(lifecycle: ListingLifecycleService = Depends(get_lifecycle)):
    return lifecycle.expired_listings()


@router.get("/expiring", response_model=List[ListingExpiry])
async def expiring_listings(
    days: Optional[int] = Query(None, ge=0),
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
    settings: Settings = Depends(get_app_settings),
):
    """Active listings expiring within `days` (default EXPIRY_WARNING_DAYS)."""
    return lifecycle.expiring_listings(warning_days=settings.EXPIRY_WARNING_DAYS if days is None else days)


@router.get("/stats", response_model=FleetStats)
async def stats(
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
    settings: Settings = Depends(get_app_settings),
):
    return fleet_stats(lifecycle.store.all(), today=lifecycle.today(), warning_days=settings.EXPIRY_WARNING_DAYS)


@router.get("/items/{item_id}", response_model=InventoryItem)
async def get_item(item_id: str, store: InventoryStore = Depends(get_store)):
    try:
        return store.get(item_id)
    except BaseServiceError as e:
        raise http_error(e)


@router.get("/items/{item_id}/health", response_model=ListingHealth)
async def item_health(item_id: str, store: InventoryStore = Depends(get_store)):
    try:
        return listing_health(store.get(item_id))
    except BaseServiceError as e:
        raise http_error(e)


@router.get("/rules")
async def expiry_rules() -> Dict[str, Dict]:
    return {platform: rule._asdict() for platform, rule in PLATFORM_EXPIRY_RULES.items()}


# Manual listing actions

@router.put("/items/{item_id}/platforms/{platform}", response_model=InventoryItem)
async def add_platform(
    item_id: str,
    platform: str,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    try:
        item = lifecycle.add_platform(item_id, platform)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return item


@router.delete("/items/{item_id}/platforms/{platform}", response_model=InventoryItem)
async def remove_platform(
    item_id: str,
    platform: str,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    try:
        item = lifecycle.remove_platform(item_id, platform)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return item


@router.put("/items/{item_id}/platforms/{platform}/status", response_model=InventoryItem)
async def set_status(
    item_id: str,
    platform: str,
    update: StatusUpdate,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    try:
        item = lifecycle.set_status(item_id, platform, update.status)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return item


@router.put("/items/{item_id}/platforms/{platform}/listing-date")
async def set_listing_date(
    item_id: str,
    platform: str,
    update: ListingDateUpdate,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    try:
        expiry = lifecycle.set_listing_date(item_id, platform, update.listed_date)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return {"item_id": item_id, "platform": platform, "expiry_date": expiry}


@router.post("/items/{item_id}/platforms/{platform}/relist", response_model=InventoryItem)
async def relist(
    item_id: str,
    platform: str,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    try:
        item = lifecycle.relist(item_id, platform)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return item


@router.post("/items/{item_id}/platforms/{platform}/sold")
async def mark_sold(
    item_id: str,
    platform: str,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    """Mark a listing sold without touching stock; cascades if the item is already sold out."""
    try:
        cascaded = lifecycle.on_sale(item_id, platform)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return {"item_id": item_id, "platform": platform, "cascaded": cascaded}


@router.post("/items/{item_id}/sales", response_model=SaleResult)
async def record_sale(
    item_id: str,
    sale: SaleEvent,
    lifecycle: ListingLifecycleService = Depends(get_lifecycle),
):
    try:
        result = lifecycle.record_sale(item_id, sale.platform, sale.quantity, sale.price)
    except (BaseServiceError, ValueError) as e:
        raise http_error(e)
    await lifecycle.store.save()
    return result


# Sweep and bulk

@router.post("/sweep", response_model=SweepResult)
async def sweep(lifecycle: ListingLifecycleService = Depends(get_lifecycle)):
    result = SweepResult(transitioned=lifecycle.sweep_expired())
    await lifecycle.store.save()
    return result


@router.post("/bulk/relist-expired", response_model=BulkResult)
async def bulk_relist_expired(bulk: BulkOperationService = Depends(get_bulk)):
    result = bulk.bulk_relist_expired()
    await bulk.store.save()
    return result


@router.post("/bulk/price", response_model=BulkPriceResult)
async def bulk_price(body: BulkPriceRequest, bulk: BulkOperationService = Depends(get_bulk)):
    result = bulk.bulk_price_adjust(body.filter, body.adjustment)
    await bulk.store.save()
    return result


# Auto-relist

@router.get("/auto-relist", response_model=AutoRelistSettings)
async def auto_relist_settings(bulk: BulkOperationService = Depends(get_bulk)):
    policy = bulk.auto_relist
    return AutoRelistSettings(enabled=policy.enabled, candidates=len(policy.candidates()))


@router.put("/auto-relist", response_model=AutoRelistSettings)
async def update_auto_relist(update: AutoRelistSettings, bulk: BulkOperationService = Depends(get_bulk)):
    policy = bulk.auto_relist
    if update.enabled:
        policy.enable()
    else:
        policy.disable()
    return AutoRelistSettings(enabled=policy.enabled, candidates=len(policy.candidates()))


@router.post("/auto-relist/run", response_model=BulkResult)
async def run_auto_relist(bulk: BulkOperationService = Depends(get_bulk)):
    result = bulk.auto_relist.run()
    await bulk.store.save()
    return result
