"""
Marketplace sync adapters.

A MarketplaceAdapter keeps one marketplace and the local inventory in step:
pull reconciles remote listings and recent orders into local listing state,
push / publish / end / relist drive the remote listing for one item. All
local listing-state writes go through the lifecycle engine.

Each adapter is a small state machine (DISCONNECTED -> CONNECTING ->
CONNECTED) with a `syncing` flag that allows one operation at a time per
adapter. Different adapters are independent and may run concurrently.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from crosslist.core.enums import AdapterState, ListingStatus
from crosslist.core.exceptions import (
    AdapterNotConnectedError,
    ListingValidationError,
    MarketplaceAPIError,
    SyncInProgressError,
)
from crosslist.schemas.item import InventoryItem
from crosslist.schemas.platform import (
    AdapterResult,
    AdapterStatus,
    PullResult,
    RemoteListing,
    RemoteOrderLine,
)
from crosslist.services.lifecycle import MANUAL_SALES_KEY, ListingLifecycleService
from crosslist.store import InventoryStore

logger = logging.getLogger(__name__)

# Processed order-line keys kept per item and platform
MAX_ORDER_LINES = 200


class MarketplaceAdapter(ABC):
    platform: str = ""
    ref_key: str = ""               # key of the remote id inside external_refs[platform]
    page_size: int = 100
    order_page_size: int = 50
    order_lookback = timedelta(hours=24)

    def __init__(self, lifecycle: ListingLifecycleService, store: InventoryStore):
        self.lifecycle = lifecycle
        self.store = store
        self.state = AdapterState.DISCONNECTED
        self.syncing = False
        self.last_sync: Optional[datetime] = None
        self._state_listeners: List[Callable[["MarketplaceAdapter"], Any]] = []

    # ── Connection state ──────────────────────────────────────────────────

    @property
    def connected(self) -> bool:
        return self.state is AdapterState.CONNECTED

    def add_state_listener(self, callback: Callable[["MarketplaceAdapter"], Any]) -> None:
        """Called with the adapter after every connect / disconnect."""
        self._state_listeners.append(callback)

    def _set_state(self, state: AdapterState) -> None:
        previous, self.state = self.state, state
        if previous is not state:
            logger.info(f"{self.platform} adapter {previous.value} -> {state.value}")
            if state is not AdapterState.CONNECTING:
                for callback in self._state_listeners:
                    callback(self)

    async def connect(self) -> None:
        """Verify credentials with a cheap API call. Raises and stays disconnected on failure."""
        if self.connected:
            return
        self._set_state(AdapterState.CONNECTING)
        try:
            await self._verify_connection()
        except Exception:
            self._set_state(AdapterState.DISCONNECTED)
            raise
        self._set_state(AdapterState.CONNECTED)

    async def disconnect(self) -> None:
        self._set_state(AdapterState.DISCONNECTED)

    def status(self) -> AdapterStatus:
        return AdapterStatus(
            platform=self.platform,
            state=self.state,
            syncing=self.syncing,
            last_sync=self.last_sync,
        )

    @asynccontextmanager
    async def _operation(self):
        if not self.connected:
            raise AdapterNotConnectedError(self.platform)
        if self.syncing:
            raise SyncInProgressError(self.platform)
        self.syncing = True
        try:
            yield
        finally:
            self.syncing = False

    # ── Pull ──────────────────────────────────────────────────────────────

    async def pull(self) -> PullResult:
        """
        Reconcile remote listings, then recent orders, into local state.

        A failed listing page or order fetch is logged and recorded in
        `errors`; the rest of the pull still runs.
        """
        async with self._operation():
            started = datetime.now(timezone.utc)
            result = PullResult()
            await self._pull_listings(result)
            await self._pull_orders(result)
            self.last_sync = started
            logger.info(
                f"{self.platform} pull: {result.matched} matched, {result.unmatched} unmatched, "
                f"{result.updated} updated, {result.sold} sold, {len(result.errors)} errors"
            )
            return result

    async def _pull_listings(self, result: PullResult) -> None:
        offset = 0
        while True:
            try:
                page = await self._fetch_listings_page(offset, self.page_size)
            except MarketplaceAPIError as e:
                logger.error(f"{self.platform} listings fetch failed at offset {offset}: {e}")
                result.errors.append(f"listings offset {offset}: {e}")
                return
            for raw in page:
                self._reconcile_listing(self._parse_listing(raw), result)
            if len(page) < self.page_size:
                return
            offset += self.page_size

    def _reconcile_listing(self, remote: RemoteListing, result: PullResult) -> None:
        item = self._match(remote.sku, remote.ref)
        if item is None:
            result.unmatched += 1
            return
        result.matched += 1
        changed = False

        ref = item.external_ref(self.platform)
        if remote.ref and ref.get(self.ref_key) != remote.ref:
            ref[self.ref_key] = remote.ref
            changed = True

        if (remote.quantity == 0 and self.platform in item.platforms
                and item.status_for(self.platform) is ListingStatus.ACTIVE):
            self.lifecycle.set_status(item.id, self.platform, ListingStatus.SOLD)
            result.sold += 1
            changed = True

        if self._backfill(item, remote):
            changed = True

        if changed:
            self.store.mark_dirty(item.id)
            result.updated += 1

    @staticmethod
    def _backfill(item: InventoryItem, remote: RemoteListing) -> bool:
        """Copy remote product details onto the item where the item has none"""
        changed = False
        if not item.name and remote.title:
            item.name = remote.title
            changed = True
        if not item.upc and remote.upc:
            item.upc = remote.upc
            changed = True
        if not item.images and remote.images:
            item.images = list(remote.images)
            changed = True
        if not item.price and remote.price:
            item.price = remote.price
            changed = True
        if not item.tags and remote.tags:
            item.tags = list(remote.tags)
            changed = True
        return changed

    async def _pull_orders(self, result: PullResult) -> None:
        since = self.last_sync or datetime.now(timezone.utc) - self.order_lookback
        offset = 0
        while True:
            try:
                orders = await self._fetch_orders_page(since, offset, self.order_page_size)
            except MarketplaceAPIError as e:
                logger.error(f"{self.platform} orders fetch failed: {e}")
                result.errors.append(f"orders offset {offset}: {e}")
                return
            for order in orders:
                for line in self._order_lines(order):
                    if self._apply_order_line(line):
                        result.sold += 1
            if len(orders) < self.order_page_size:
                return
            offset += self.order_page_size

    def _apply_order_line(self, line: RemoteOrderLine) -> bool:
        """
        Record a sale for an order line not seen before. Returns True if recorded.

        Units already entered by hand on this platform are netted off first,
        so a sale recorded locally is not counted again when its order arrives.
        """
        item = self._match(line.sku, line.ref)
        if item is None:
            return False
        ref = item.external_ref(self.platform)
        processed = ref.setdefault("order_lines", [])
        if line.key in processed:
            return False
        processed.append(line.key)
        del processed[:-MAX_ORDER_LINES]
        self.store.mark_dirty(item.id)

        quantity = line.quantity
        manual = ref.get(MANUAL_SALES_KEY, 0)
        if manual:
            netted = min(manual, quantity)
            quantity -= netted
            if manual > netted:
                ref[MANUAL_SALES_KEY] = manual - netted
            else:
                ref.pop(MANUAL_SALES_KEY)
        if quantity == 0:
            logger.info(f"{self.platform} order line {line.key}: item {item.id} already recorded as sold")
            return False

        if self.platform not in item.platforms:
            self.lifecycle.add_platform(item.id, self.platform)
        sale = self.lifecycle.record_sale(item.id, self.platform, quantity, line.price, manual=False)
        logger.info(f"{self.platform} order line {line.key}: item {item.id} sold, {sale.qty_remaining} left")
        return True

    def _match(self, sku: Optional[str], ref: Optional[str]) -> Optional[InventoryItem]:
        """Local item for a remote record: by SKU first, then by stored reference"""
        return self.store.find_by_sku(sku) or self.store.find_by_external_ref(self.platform, self.ref_key, ref)

    # ── Push / publish / end / relist ─────────────────────────────────────

    async def push(self, item_id: str) -> AdapterResult:
        """
        Create or update the remote record for an item.

        The local listing becomes a draft with a fresh listing date unless it is
        already active, in which case its status and listing date are kept. On a
        marketplace error nothing local changes.
        """
        async with self._operation():
            return await self._push(self.store.get(item_id))

    async def _push(self, item: InventoryItem) -> AdapterResult:
        was_active = item.status_for(self.platform) is ListingStatus.ACTIVE and self.platform in item.platforms
        try:
            ref_updates = await self._push_remote(item)
        except MarketplaceAPIError as e:
            logger.error(f"{self.platform} push failed for item {item.id}: {e}")
            return AdapterResult(success=False, reason=str(e))

        item.external_ref(self.platform).update(ref_updates)
        self.lifecycle.add_platform(item.id, self.platform)
        if not was_active:
            self.lifecycle.set_status(item.id, self.platform, ListingStatus.DRAFT)
            self.lifecycle.set_listing_date(item.id, self.platform)

        logger.info(f"Pushed item {item.id} to {self.platform}")
        return AdapterResult(
            success=True,
            external_ref=self._remote_id(item),
            is_draft=item.status_for(self.platform) is ListingStatus.DRAFT,
        )

    async def publish(self, item_id: str) -> AdapterResult:
        """Make a pushed listing live. Needs a prior push and a price above zero."""
        async with self._operation():
            item = self.store.get(item_id)
            ref = self._require_ref(item, "Push it first.")
            if not item.price or item.price <= 0:
                raise ListingValidationError(f"Item {item.id} needs a price before listing")
            try:
                listing_id = await self._publish_remote(item, ref)
            except MarketplaceAPIError as e:
                logger.error(f"{self.platform} publish failed for item {item.id}: {e}")
                return AdapterResult(success=False, reason=str(e))

            self.lifecycle.add_platform(item.id, self.platform)
            self.lifecycle.mark_listed(item.id, self.platform)
            logger.info(f"Published item {item.id} on {self.platform} ({listing_id})")
            return AdapterResult(success=True, external_ref=listing_id)

    async def end(self, item_id: str) -> AdapterResult:
        async with self._operation():
            item = self.store.get(item_id)
            ref = self._require_ref(item)
            if self.platform not in item.platforms:
                raise ListingValidationError(f"Item {item.id} is not listed on {self.platform}")
            try:
                await self._end_remote(item, ref)
            except MarketplaceAPIError as e:
                logger.error(f"{self.platform} end failed for item {item.id}: {e}")
                return AdapterResult(success=False, reason=str(e))

            self.lifecycle.set_status(item.id, self.platform, ListingStatus.DELISTED)
            logger.info(f"Ended item {item.id} on {self.platform}")
            return AdapterResult(success=True, external_ref=self._remote_id(item))

    async def relist(self, item_id: str) -> AdapterResult:
        """Restore an ended or expired listing; items never pushed are pushed instead."""
        async with self._operation():
            item = self.store.get(item_id)
            ref = item.external_refs.get(self.platform) or {}
            if not ref.get(self.ref_key):
                return await self._push(item)
            try:
                await self._restore_remote(item, ref)
            except MarketplaceAPIError as e:
                logger.error(f"{self.platform} relist failed for item {item.id}: {e}")
                return AdapterResult(success=False, reason=str(e))

            self.lifecycle.add_platform(item.id, self.platform)
            self.lifecycle.relist(item.id, self.platform)
            return AdapterResult(success=True, external_ref=self._remote_id(item))

    def _require_ref(self, item: InventoryItem, hint: str = "") -> Dict[str, Any]:
        ref = item.external_refs.get(self.platform) or {}
        if not ref.get(self.ref_key):
            raise ListingValidationError(f"Item {item.id} is not on {self.platform}. {hint}".strip())
        return ref

    def _remote_id(self, item: InventoryItem) -> Optional[str]:
        value = (item.external_refs.get(self.platform) or {}).get(self.ref_key)
        return str(value) if value is not None else None

    # ── Marketplace specifics ─────────────────────────────────────────────

    @abstractmethod
    async def _verify_connection(self) -> None:
        """Cheap authenticated call; raises MarketplaceAPIError when credentials are bad"""

    @abstractmethod
    async def _fetch_listings_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        """One page of raw remote listings"""

    @abstractmethod
    def _parse_listing(self, raw: Dict[str, Any]) -> RemoteListing:
        pass

    @abstractmethod
    async def _fetch_orders_page(self, since: datetime, offset: int, limit: int) -> List[Dict[str, Any]]:
        """One page of raw orders created since `since`"""

    @abstractmethod
    def _order_lines(self, order: Dict[str, Any]) -> List[RemoteOrderLine]:
        pass

    @abstractmethod
    async def _push_remote(self, item: InventoryItem) -> Dict[str, Any]:
        """Create or update the remote record; returns reference fields to store"""

    @abstractmethod
    async def _publish_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> Optional[str]:
        """Make the listing live; returns the public listing id"""

    @abstractmethod
    async def _end_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def _restore_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> None:
        pass


def build_description(item: InventoryItem, closing_line: str) -> str:
    """Plain-text listing description shared by the marketplaces"""
    parts = []
    if item.condition:
        parts.append(f"Condition: {item.condition}")
    if item.category:
        parts.append(f"Category: {item.category}")
    if item.notes:
        parts.append(item.notes)
    parts.append(closing_line)
    return "\n".join(parts)


def web_images(images: List[str], limit: int) -> List[str]:
    """Image URLs a marketplace can fetch (http/https only), capped at `limit`"""
    return [url for url in images if url and url.startswith(("http://", "https://"))][:limit]
