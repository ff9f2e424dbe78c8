"""
Etsy sync adapter on the Open API v3.

Listings are created in the shop and moved between states with PATCH:
`active` to publish or renew, `inactive` to end. A listing missing a
taxonomy or shipping profile can only be saved as a draft on Etsy.

external_refs["Etsy"]: listing_id, order_lines.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from crosslist.core.config import Settings
from crosslist.core.enums import ETSY
from crosslist.core.exceptions import EtsyAPIError, ListingValidationError
from crosslist.integrations.base import MarketplaceAdapter, build_description
from crosslist.schemas.item import InventoryItem
from crosslist.schemas.platform import RemoteListing, RemoteOrderLine
from crosslist.services.etsy.client import EtsyClient

logger = logging.getLogger(__name__)

TITLE_LIMIT = 140
TAG_LIMIT = 13
TAG_LENGTH = 20

STATE_ACTIVE = "active"
STATE_INACTIVE = "inactive"
STATE_DRAFT = "draft"

# Resellers sell items made by others
LISTING_DEFAULTS = {
    "who_made": "someone_else",
    "when_made": "2020_2025",
    "is_supply": False,
    "type": "physical",
}


def money(value: Optional[Dict[str, Any]]) -> Optional[float]:
    """Etsy Money object ({amount, divisor}) as a float"""
    if not value or not value.get("amount"):
        return None
    return value["amount"] / (value.get("divisor") or 1)


def listing_tags(item: InventoryItem) -> List[str]:
    """The item's tags, or tags derived from its name and category"""
    if item.tags:
        return [t[:TAG_LENGTH] for t in item.tags[:TAG_LIMIT]]
    tags = [w[:TAG_LENGTH] for w in (item.name or "").split() if len(w) > 2][:8]
    if item.category:
        tags.append(item.category[:TAG_LENGTH])
    return tags[:TAG_LIMIT]


class EtsyAdapter(MarketplaceAdapter):
    platform = ETSY
    ref_key = "listing_id"

    def __init__(self, lifecycle, store, client: EtsyClient, settings: Settings):
        super().__init__(lifecycle, store)
        self.client = client
        self.settings = settings

    async def _verify_connection(self) -> None:
        await self.client.get_shop()

    # Pull

    async def _fetch_listings_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        response = await self.client.get_listings(state=STATE_ACTIVE, limit=limit, offset=offset)
        return response.get("results") or []

    def _parse_listing(self, raw: Dict[str, Any]) -> RemoteListing:
        skus = raw.get("skus") or []
        images = sorted(raw.get("images") or [], key=lambda img: img.get("rank") or 0)
        listing_id = raw.get("listing_id")
        return RemoteListing(
            ref=str(listing_id) if listing_id is not None else None,
            sku=skus[0] if skus else None,
            quantity=raw.get("quantity"),
            title=raw.get("title"),
            images=[url for url in (img.get("url_570xN") or img.get("url_fullxfull") for img in images) if url],
            price=money(raw.get("price")),
            tags=raw.get("tags") or [],
        )

    async def _fetch_orders_page(self, since: datetime, offset: int, limit: int) -> List[Dict[str, Any]]:
        response = await self.client.get_receipts(min_created=int(since.timestamp()), limit=limit, offset=offset)
        return response.get("results") or []

    def _order_lines(self, receipt: Dict[str, Any]) -> List[RemoteOrderLine]:
        lines = []
        for txn in receipt.get("transactions") or []:
            listing_id = txn.get("listing_id")
            lines.append(RemoteOrderLine(
                key=f"{receipt.get('receipt_id')}:{txn.get('transaction_id')}",
                ref=str(listing_id) if listing_id is not None else None,
                sku=txn.get("sku") or None,
                quantity=max(int(txn.get("quantity") or 1), 1),
                price=money(txn.get("price")),
            ))
        return lines

    # Push / publish / end / relist

    def build_listing_payload(self, item: InventoryItem) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": (item.name or "Item")[:TITLE_LIMIT],
            "description": build_description(item, "\nShips fast! Check my shop for bundle deals and more items."),
            "quantity": item.qty or 1,
            "price": item.price,
            "tags": listing_tags(item),
            **LISTING_DEFAULTS,
        }
        if item.sku:
            payload["sku"] = [item.sku]
        if self.settings.ETSY_TAXONOMY_ID:
            payload["taxonomy_id"] = self.settings.ETSY_TAXONOMY_ID
        if self.settings.ETSY_SHIPPING_PROFILE_ID:
            payload["shipping_profile_id"] = self.settings.ETSY_SHIPPING_PROFILE_ID
        return payload

    async def _push_remote(self, item: InventoryItem) -> Dict[str, Any]:
        if not item.price or item.price <= 0:
            raise ListingValidationError(f"Item {item.id} needs a price before listing on Etsy")

        payload = self.build_listing_payload(item)
        listing_id = (item.external_refs.get(self.platform) or {}).get("listing_id")
        if listing_id:
            await self.client.update_listing(listing_id, payload)
            return {"listing_id": str(listing_id)}

        if "taxonomy_id" not in payload or "shipping_profile_id" not in payload:
            logger.warning(f"Etsy taxonomy or shipping profile not configured; item {item.id} saved as draft")
            payload["state"] = STATE_DRAFT
        response = await self.client.create_listing(payload)
        if not response.get("listing_id"):
            raise EtsyAPIError("Etsy did not return a listing id")
        return {"listing_id": str(response["listing_id"])}

    async def _publish_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> Optional[str]:
        await self.client.update_listing(ref["listing_id"], {"state": STATE_ACTIVE})
        return str(ref["listing_id"])

    async def _end_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> None:
        await self.client.update_listing(ref["listing_id"], {"state": STATE_INACTIVE})

    async def _restore_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> None:
        await self.client.update_listing(ref["listing_id"], {"state": STATE_ACTIVE, "quantity": item.qty or 1})
