"""
eBay sync adapter on the Sell Inventory and Fulfillment APIs.

eBay splits a listing in two: an inventory item (product details and
quantity, keyed by SKU) and an offer (price, policies) that is published to
go live. Push writes the inventory item, publish creates or reuses the offer
and publishes it. Ending and relisting only change the inventory quantity.

external_refs["eBay"]: sku, offer_id, listing_id, order_lines.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from crosslist.core.config import Settings
from crosslist.core.enums import EBAY
from crosslist.core.exceptions import EbayAPIError
from crosslist.integrations.base import MarketplaceAdapter, build_description, web_images
from crosslist.schemas.item import InventoryItem
from crosslist.schemas.platform import RemoteListing, RemoteOrderLine
from crosslist.services.ebay.client import EbayClient

logger = logging.getLogger(__name__)

TITLE_LIMIT = 80
IMAGE_LIMIT = 12
DEFAULT_CONDITION = "good"

# Local condition -> eBay condition id and Inventory API enum
CONDITION_MAP = {
    "new":        (1000, "NEW"),
    "like new":   (3000, "LIKE_NEW"),
    "open box":   (1500, "NEW_OTHER"),
    "excellent":  (2750, "USED_EXCELLENT"),
    "very good":  (4000, "USED_VERY_GOOD"),
    "good":       (5000, "USED_GOOD"),
    "acceptable": (6000, "USED_ACCEPTABLE"),
    "fair":       (6000, "USED_ACCEPTABLE"),
    "poor":       (7000, "FOR_PARTS_OR_NOT_WORKING"),
}


def map_condition(condition: Optional[str]):
    """(condition_id, condition_enum) for a local condition, 'good' when unknown"""
    key = (condition or DEFAULT_CONDITION).strip().lower()
    return CONDITION_MAP.get(key, CONDITION_MAP[DEFAULT_CONDITION])


class EbayAdapter(MarketplaceAdapter):
    platform = EBAY
    ref_key = "sku"

    def __init__(self, lifecycle, store, client: EbayClient, settings: Settings):
        super().__init__(lifecycle, store)
        self.client = client
        self.settings = settings

    async def _verify_connection(self) -> None:
        await self.client.get_privileges()

    # Pull

    async def _fetch_listings_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        response = await self.client.get_inventory_items(limit=limit, offset=offset)
        return response.get("inventoryItems") or []

    def _parse_listing(self, raw: Dict[str, Any]) -> RemoteListing:
        product = raw.get("product") or {}
        availability = (raw.get("availability") or {}).get("shipToLocationAvailability")
        upcs = product.get("upc") or []
        return RemoteListing(
            ref=raw.get("sku"),
            sku=raw.get("sku"),
            quantity=availability.get("quantity") if availability else None,
            title=product.get("title"),
            upc=upcs[0] if upcs else None,
            images=product.get("imageUrls") or [],
        )

    async def _fetch_orders_page(self, since: datetime, offset: int, limit: int) -> List[Dict[str, Any]]:
        stamp = since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")
        response = await self.client.get_orders(since=stamp, limit=limit, offset=offset)
        return response.get("orders") or []

    def _order_lines(self, order: Dict[str, Any]) -> List[RemoteOrderLine]:
        lines = []
        for line in order.get("lineItems") or []:
            sku = line.get("sku")
            if not sku:
                continue
            total = (line.get("total") or {}).get("value")
            lines.append(RemoteOrderLine(
                key=f"{order.get('orderId')}:{line.get('lineItemId')}",
                ref=sku,
                sku=sku,
                quantity=max(int(line.get("quantity") or 1), 1),
                price=float(total) if total else None,
            ))
        return lines

    # Push / publish / end / relist

    def sku_for(self, item: InventoryItem) -> str:
        """Existing eBay SKU, else the item's SKU, else one derived from the id"""
        ref = item.external_refs.get(self.platform) or {}
        return ref.get("sku") or item.sku or f"FT-{item.id[:12]}"

    def build_inventory_payload(self, item: InventoryItem) -> Dict[str, Any]:
        _, condition_enum = map_condition(item.condition)
        product: Dict[str, Any] = {
            "title": (item.name or "Item")[:TITLE_LIMIT],
            "description": build_description(item, "Ships fast! Check my other listings for bundle deals."),
            "aspects": self._aspects(item),
            "imageUrls": web_images(item.images, IMAGE_LIMIT),
        }
        if item.upc:
            product["upc"] = [item.upc]
        if item.isbn:
            product["isbn"] = [item.isbn]

        payload: Dict[str, Any] = {
            "availability": {"shipToLocationAvailability": {"quantity": item.qty or 1}},
            "condition": condition_enum,
            "product": product,
        }
        if item.notes:
            payload["conditionDescription"] = item.notes
        return payload

    @staticmethod
    def _aspects(item: InventoryItem) -> Dict[str, List[str]]:
        aspects = {}
        if item.category:
            aspects["Category"] = [item.category]
        if item.condition:
            aspects["Condition"] = [item.condition]
        if item.isbn:
            aspects["ISBN"] = [item.isbn]
        return aspects

    def build_offer_payload(self, item: InventoryItem, sku: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "sku": sku,
            "marketplaceId": self.settings.EBAY_MARKETPLACE_ID,
            "format": "FIXED_PRICE",
            "listingDuration": "GTC",
            "availableQuantity": item.qty or 1,
            "pricingSummary": {
                "price": {"value": f"{item.price:.2f}", "currency": self.settings.EBAY_CURRENCY},
            },
        }
        if self.settings.EBAY_CATEGORY_ID:
            payload["categoryId"] = self.settings.EBAY_CATEGORY_ID
        if self.settings.EBAY_MERCHANT_LOCATION_KEY:
            payload["merchantLocationKey"] = self.settings.EBAY_MERCHANT_LOCATION_KEY
        policies = {
            "fulfillmentPolicyId": self.settings.EBAY_FULFILLMENT_POLICY_ID,
            "paymentPolicyId": self.settings.EBAY_PAYMENT_POLICY_ID,
            "returnPolicyId": self.settings.EBAY_RETURN_POLICY_ID,
        }
        policies = {k: v for k, v in policies.items() if v}
        if policies:
            payload["listingPolicies"] = policies
        return payload

    async def _push_remote(self, item: InventoryItem) -> Dict[str, Any]:
        sku = self.sku_for(item)
        await self.client.create_or_replace_inventory_item(sku, self.build_inventory_payload(item))
        return {"sku": sku}

    async def _publish_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> Optional[str]:
        sku = ref["sku"]
        offer_id = ref.get("offer_id") or await self._existing_offer_id(sku)
        if not offer_id:
            response = await self.client.create_offer(self.build_offer_payload(item, sku))
            offer_id = response.get("offerId")
            if not offer_id:
                errors = response.get("errors") or []
                message = errors[0].get("message") if errors else None
                raise EbayAPIError(message or "Could not create offer. Check your eBay business policies.")
        ref["offer_id"] = offer_id

        published = await self.client.publish_offer(offer_id)
        listing_id = published.get("listingId")
        if listing_id:
            ref["listing_id"] = listing_id
        self.store.mark_dirty(item.id)
        return listing_id

    async def _existing_offer_id(self, sku: str) -> Optional[str]:
        try:
            response = await self.client.get_offers(sku)
        except EbayAPIError as e:
            # eBay answers 404 when the SKU has no offers yet
            if e.status_code == 404:
                return None
            raise
        offers = response.get("offers") or []
        return offers[0].get("offerId") if offers else None

    async def _end_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> None:
        await self._set_remote_quantity(item, ref["sku"], 0)

    async def _restore_remote(self, item: InventoryItem, ref: Dict[str, Any]) -> None:
        await self._set_remote_quantity(item, ref["sku"], item.qty or 1)

    async def _set_remote_quantity(self, item: InventoryItem, sku: str, quantity: int) -> None:
        # PUT replaces the whole record, so the product details go with it
        payload = self.build_inventory_payload(item)
        payload["availability"]["shipToLocationAvailability"]["quantity"] = quantity
        await self.client.create_or_replace_inventory_item(sku, payload)
