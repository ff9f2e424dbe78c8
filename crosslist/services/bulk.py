# crosslist/services/bulk.py
"""
Batch operations over many item x platform pairs.

Each operation is applied item by item through the lifecycle engine. A batch
is not atomic: when one item fails the items already processed stay changed
and the rest are still attempted. Results always report the work actually
done.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from crosslist.core.enums import AdjustType, PriceSource
from crosslist.core.expiry_rules import get_expiry_rule
from crosslist.schemas.crosslist import (
    BulkPriceResult,
    BulkResult,
    ListingExpiry,
    PriceAdjustFilter,
    PriceAdjustment,
)
from crosslist.schemas.item import InventoryItem
from crosslist.services.lifecycle import ListingLifecycleService

logger = logging.getLogger(__name__)


class AutoRelistPolicy:
    """
    Relists expired listings on platforms that support renewal.

    A platform whose rule is not renewable is never relisted automatically,
    since that would claim a renewal the marketplace never performed.
    """

    def __init__(self, lifecycle: ListingLifecycleService, enabled: bool = False):
        self.lifecycle = lifecycle
        self.enabled = enabled

    def enable(self):
        self.enabled = True
        logger.info("Auto-relist enabled")

    def disable(self):
        self.enabled = False
        logger.info("Auto-relist disabled")

    def candidates(self, items: Optional[Iterable[InventoryItem]] = None) -> List[ListingExpiry]:
        in_stock = [i for i in self.lifecycle.resolve_items(items) if i.in_stock]
        results = []
        for match in self.lifecycle.expired_listings(in_stock):
            rule = get_expiry_rule(match.platform, self.lifecycle.rules)
            if rule is not None and rule.renewable:
                results.append(match)
        return results

    def run(self, items: Optional[Iterable[InventoryItem]] = None) -> BulkResult:
        result = relist_each(self.lifecycle, self.candidates(items))
        if result.processed:
            logger.info(f"Auto-relisted {result.processed} listings")
        return result


def relist_each(lifecycle: ListingLifecycleService, matches: List[ListingExpiry]) -> BulkResult:
    result = BulkResult()
    for match in matches:
        try:
            lifecycle.relist(match.item_id, match.platform)
        except Exception:
            logger.exception(f"Failed to relist item {match.item_id} on {match.platform}")
            result.failed += 1
            continue
        result.processed += 1
        if match.item_id not in result.item_ids:
            result.item_ids.append(match.item_id)
    return result


class BulkOperationService:

    def __init__(self, lifecycle: ListingLifecycleService, auto_relist_enabled: bool = False):
        self.lifecycle = lifecycle
        self.store = lifecycle.store
        self.auto_relist = AutoRelistPolicy(lifecycle, enabled=auto_relist_enabled)

    def bulk_relist_expired(self, items: Optional[Iterable[InventoryItem]] = None) -> BulkResult:
        """Relist every expired listing of every in-stock item."""
        in_stock = [i for i in self.lifecycle.resolve_items(items) if i.in_stock]
        # Snapshot first; relisting changes the state expired_listings reads
        matches = self.lifecycle.expired_listings(in_stock)
        result = relist_each(self.lifecycle, matches)
        logger.info(f"Bulk relist: {result.processed} relisted, {result.failed} failed")
        return result

    def bulk_price_adjust(self, filter: PriceAdjustFilter, adjustment: PriceAdjustment) -> BulkPriceResult:
        """
        Apply a percentage or fixed price change to in-stock items matching
        the filter. Listing status plays no part in selection.
        """
        result = BulkPriceResult()
        if not adjustment.value:
            return result

        for item in self.store.all():
            if not self._matches(item, filter):
                continue
            new_price = self._adjusted_price(item.price, adjustment)
            if new_price == item.price:
                continue
            item.price = new_price
            self.store.mark_dirty(item.id)
            self.lifecycle.price_history.log_price_change(item.id, new_price, PriceSource.REPRICING)
            result.adjusted += 1
            result.item_ids.append(item.id)

        logger.info(f"Bulk price adjust ({adjustment.adjust_type.value} {adjustment.value}): {result.adjusted} items")
        return result

    def _matches(self, item: InventoryItem, filter: PriceAdjustFilter) -> bool:
        if not item.in_stock or item.price <= 0:
            return False
        if filter.category and item.category != filter.category:
            return False
        if filter.platform and filter.platform not in item.platforms:
            return False
        if filter.min_days_listed > 0:
            listed = self._listed_since(item, filter.platform)
            if listed is None:
                return False
            if (self.lifecycle.today() - listed).days < filter.min_days_listed:
                return False
        return True

    @staticmethod
    def _listed_since(item: InventoryItem, platform: Optional[str]) -> Optional[date]:
        if platform:
            return item.platform_listing_dates.get(platform)
        dates = [d for p, d in item.platform_listing_dates.items() if p in item.platforms]
        return min(dates) if dates else None

    @staticmethod
    def _adjusted_price(price: float, adjustment: PriceAdjustment) -> float:
        if adjustment.adjust_type is AdjustType.PERCENT:
            new_price = price * (1 + adjustment.value / 100)
        else:
            new_price = price + adjustment.value
        return max(round(new_price, 2), 0.0)
