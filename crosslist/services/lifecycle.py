# crosslist/services/lifecycle.py
"""
Listing lifecycle engine.

Every write to an item's per-platform listing state (status, listing date,
expiry, last relist) goes through ListingLifecycleService. Marketplace
adapters, the bulk layer, the scheduler and the HTTP routes all call these
methods rather than touching the item mappings themselves.

Mutations are synchronous and in-memory; each one marks the item dirty on the
repository, and callers await repository.save() to make it durable.
"""

import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Union

from crosslist.core.enums import ListingStatus
from crosslist.core.exceptions import InvalidStatusError, ListingValidationError
from crosslist.core.expiry_rules import ExpiryRule
from crosslist.core.utils import DateLike, to_date, today as current_day
from crosslist.schemas.crosslist import ListingExpiry, SaleResult
from crosslist.schemas.item import InventoryItem
from crosslist.services.expiry import compute_expiry, days_until_expiry
from crosslist.services.price_history import PriceHistoryService
from crosslist.store import ItemRepository

logger = logging.getLogger(__name__)

# Statuses an expired listing can be found in: still marked active, or already swept
EXPIRABLE_STATUSES = (ListingStatus.ACTIVE, ListingStatus.EXPIRED)

# Units sold by hand on a platform whose marketplace order has not been pulled yet
MANUAL_SALES_KEY = "manual_sales"


def coerce_status(status: Union[ListingStatus, str]) -> ListingStatus:
    if isinstance(status, ListingStatus):
        return status
    try:
        return ListingStatus(status)
    except ValueError:
        raise InvalidStatusError(f"Unknown listing status: {status!r}")


class ListingLifecycleService:

    def __init__(
        self,
        store: ItemRepository,
        clock: Optional[Callable[[], date]] = None,
        rules: Optional[Dict[str, ExpiryRule]] = None,
    ):
        self.store = store
        self.clock = clock or current_day
        self.rules = rules
        self.price_history = PriceHistoryService(store)

    def today(self) -> date:
        return self.clock()

    # ── Status transitions ────────────────────────────────────────────────

    def set_status(self, item_id: str, platform: str, status: Union[ListingStatus, str]) -> InventoryItem:
        """
        Direct status write. The low-level primitive for every other transition.

        The platform must be one the item is listed on; use add_platform first.
        """
        self._require_platform(platform)
        new_status = coerce_status(status)
        item = self.store.get(item_id)
        self._require_member(item, platform)
        item.platform_status[platform] = new_status
        self.store.mark_dirty(item_id)
        logger.debug(f"Item {item_id} on {platform} -> {new_status.value}")
        return item

    def set_listing_date(self, item_id: str, platform: str, listed_date: DateLike = None) -> Optional[date]:
        """
        Store the date a listing was (re)published and recompute its expiry.

        Defaults to today. Returns the stored expiry, or None when the
        platform has no expiry (in which case any old expiry is cleared).
        """
        self._require_platform(platform)
        item = self.store.get(item_id)
        listed = to_date(listed_date) or self.today()
        item.platform_listing_dates[platform] = listed

        expiry = compute_expiry(platform, listed, self.rules)
        if expiry is not None:
            item.platform_listing_expiry[platform] = expiry
        else:
            item.platform_listing_expiry.pop(platform, None)

        self.store.mark_dirty(item_id)
        return expiry

    def mark_listed(self, item_id: str, platform: str) -> InventoryItem:
        """Listing went live today: reset the clock and make it active."""
        self.set_listing_date(item_id, platform, self.today())
        return self.set_status(item_id, platform, ListingStatus.ACTIVE)

    def relist(self, item_id: str, platform: str) -> InventoryItem:
        """
        Relist one listing: record the relist, reset the listing date to today
        and return the status to active. All relist paths use this.
        """
        self._require_platform(platform)
        item = self.store.get(item_id)
        self._require_member(item, platform)
        item.last_relisted[platform] = self.today()
        self.store.mark_dirty(item_id)
        logger.info(f"Relisting item {item_id} on {platform}")
        return self.mark_listed(item_id, platform)

    def add_platform(self, item_id: str, platform: str, listed_date: DateLike = None) -> InventoryItem:
        """
        Add a platform to an item. A platform seen for the first time starts
        active with a fresh listing date; fields left over from an earlier
        removal are kept as they were.
        """
        self._require_platform(platform)
        item = self.store.get(item_id)
        if platform not in item.platforms:
            item.platforms.append(platform)
            self.store.mark_dirty(item_id)
        if platform not in item.platform_status:
            self.set_status(item_id, platform, ListingStatus.ACTIVE)
        if platform not in item.platform_listing_dates:
            self.set_listing_date(item_id, platform, listed_date)
        return item

    def remove_platform(self, item_id: str, platform: str) -> InventoryItem:
        """Drop platform membership only; its status and date fields stay on the record."""
        item = self.store.get(item_id)
        if platform in item.platforms:
            item.platforms.remove(platform)
            self.store.mark_dirty(item_id)
        return item

    def init_listing_dates(self) -> int:
        """
        Backfill listing dates (and expiries) for listings that have none,
        using the item's added date or today. Run once at startup.
        """
        patched = 0
        for item in self.store.all():
            if not item.platforms:
                continue
            fallback = item.added or self.today()
            for platform in item.platforms:
                if platform in item.platform_listing_dates:
                    continue
                self.set_listing_date(item.id, platform, fallback)
                patched += 1
        if patched:
            logger.info(f"Backfilled listing dates for {patched} listings")
        return patched

    # ── Sales ─────────────────────────────────────────────────────────────

    def on_sale(self, item_id: str, sold_platform: str) -> List[str]:
        """
        Mark `sold_platform` sold and, once the item is sold out, mark every
        other active listing sold-elsewhere.

        Listings that are delisted, expired, draft or already sold are left
        alone. Returns the platforms that were cascaded.
        """
        self._require_platform(sold_platform)
        item = self.set_status(item_id, sold_platform, ListingStatus.SOLD)

        cascaded: List[str] = []
        if item.qty > 0:
            return cascaded

        for platform in item.platforms:
            if platform == sold_platform:
                continue
            if item.status_for(platform) is ListingStatus.ACTIVE:
                self.set_status(item_id, platform, ListingStatus.SOLD_ELSEWHERE)
                cascaded.append(platform)

        if cascaded:
            logger.info(f"Item {item_id} sold out on {sold_platform}; marked sold elsewhere on {', '.join(cascaded)}")
        return cascaded

    def record_sale(
        self,
        item_id: str,
        platform: str,
        quantity: int = 1,
        price: Optional[float] = None,
        manual: bool = True,
    ) -> SaleResult:
        """
        Record a sale of `quantity` units on `platform`: reduce stock, log the
        price, cascade.

        A manual sale (entered by hand rather than read from a marketplace
        order) is tallied under MANUAL_SALES_KEY on the platform's external
        ref, so the sync adapter can net it off the order when it pulls it.
        """
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        self._require_platform(platform)
        item = self.store.get(item_id)
        self._require_member(item, platform)
        item.qty = max(item.qty - quantity, 0)
        if manual:
            ref = item.external_ref(platform)
            ref[MANUAL_SALES_KEY] = ref.get(MANUAL_SALES_KEY, 0) + quantity
        self.store.mark_dirty(item_id)

        if price is not None and price > 0:
            self.price_history.log_sale_price(item_id, price, platform)

        cascaded = self.on_sale(item_id, platform)
        return SaleResult(item_id=item_id, platform=platform, qty_remaining=item.qty, cascaded=cascaded)

    # ── Expiry detection ──────────────────────────────────────────────────

    def expired_listings(self, items: Optional[Iterable[InventoryItem]] = None) -> List[ListingExpiry]:
        """Listings past their expiry date that are still active or already marked expired."""
        now = self.today()
        results = []
        for item in self.resolve_items(items):
            for platform in item.platforms:
                if item.status_for(platform) not in EXPIRABLE_STATUSES:
                    continue
                expiry = item.platform_listing_expiry.get(platform)
                if expiry is not None and expiry < now:
                    results.append(ListingExpiry(
                        item_id=item.id,
                        platform=platform,
                        expiry_date=expiry,
                        listed_date=item.platform_listing_dates.get(platform),
                        days_left=(expiry - now).days,
                    ))
        return results

    def expiring_listings(self, items: Optional[Iterable[InventoryItem]] = None, warning_days: int = 7) -> List[ListingExpiry]:
        """Active listings expiring within `warning_days`, most urgent first."""
        now = self.today()
        results = []
        for item in self.resolve_items(items):
            for platform in item.platforms:
                if item.status_for(platform) is not ListingStatus.ACTIVE:
                    continue
                expiry = item.platform_listing_expiry.get(platform)
                if expiry is None:
                    continue
                days_left = (expiry - now).days
                if 0 <= days_left <= warning_days:
                    results.append(ListingExpiry(
                        item_id=item.id,
                        platform=platform,
                        expiry_date=expiry,
                        listed_date=item.platform_listing_dates.get(platform),
                        days_left=days_left,
                    ))
        return sorted(results, key=lambda r: (r.days_left, r.item_id, r.platform))

    def sweep_expired(self, items: Optional[Iterable[InventoryItem]] = None) -> int:
        """
        Mark every expired listing as expired. Safe to run repeatedly: returns
        the number of transitions actually made, so 0 means nothing new.
        """
        transitioned = 0
        for match in self.expired_listings(items):
            item = self.store.get(match.item_id)
            if item.status_for(match.platform) is ListingStatus.EXPIRED:
                continue
            self.set_status(match.item_id, match.platform, ListingStatus.EXPIRED)
            transitioned += 1
        if transitioned:
            logger.info(f"{transitioned} listing{'s' if transitioned > 1 else ''} expired")
        return transitioned

    def days_until_expiry(self, item_id: str, platform: str) -> Optional[int]:
        item = self.store.get(item_id)
        return days_until_expiry(platform, item.platform_listing_dates.get(platform), self.today(), self.rules)

    # ── Helpers ───────────────────────────────────────────────────────────

    def resolve_items(self, items: Optional[Iterable[InventoryItem]]) -> Iterable[InventoryItem]:
        return self.store.all() if items is None else items

    @staticmethod
    def _require_platform(platform: str) -> None:
        if not platform:
            raise ValueError("platform is required")

    @staticmethod
    def _require_member(item: InventoryItem, platform: str) -> None:
        if platform not in item.platforms:
            raise ListingValidationError(f"Item {item.id} is not listed on {platform}")
