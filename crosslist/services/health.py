# crosslist/services/health.py
"""
Read-only rollups of listing state for dashboards.

Pure reductions over the item records: nothing is cached and nothing is
written, so they can be called on every render.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from crosslist.core.enums import ListingStatus
from crosslist.core.utils import today as current_day
from crosslist.schemas.crosslist import FleetStats, ListingHealth
from crosslist.schemas.item import InventoryItem

STATUS_FIELDS = {
    ListingStatus.ACTIVE: "active",
    ListingStatus.SOLD: "sold",
    ListingStatus.SOLD_ELSEWHERE: "sold_elsewhere",
    ListingStatus.EXPIRED: "expired",
    ListingStatus.DELISTED: "delisted",
    ListingStatus.DRAFT: "draft",
}


def listing_health(item: InventoryItem) -> ListingHealth:
    """Count an item's listings by status."""
    health = ListingHealth(total_platforms=len(item.platforms))
    for platform in item.platforms:
        status = item.status_for(platform) or ListingStatus.ACTIVE
        field = STATUS_FIELDS[status]
        setattr(health, field, getattr(health, field) + 1)
    return health


def fleet_stats(
    items: Iterable[InventoryItem],
    today: Optional[date] = None,
    warning_days: int = 7,
) -> FleetStats:
    """
    Fleet-wide crosslisting totals over in-stock items (qty > 0).

    Expiring-soon counts active listings whose stored expiry falls within
    `warning_days` of today.
    """
    now = today or current_day()
    cutoff = now + timedelta(days=warning_days)
    stats = FleetStats()

    for item in items:
        if not item.in_stock:
            continue
        health = listing_health(item)
        stats.total_active += health.active
        stats.total_expired += health.expired
        stats.total_sold_elsewhere += health.sold_elsewhere
        if health.total_platforms == 0:
            stats.items_not_listed += 1
        elif health.total_platforms == 1:
            stats.items_single_platform += 1

        for platform in item.platforms:
            if item.status_for(platform) is not ListingStatus.ACTIVE:
                continue
            expiry = item.platform_listing_expiry.get(platform)
            if expiry is not None and now <= expiry <= cutoff:
                stats.total_expiring_soon += 1

    return stats
