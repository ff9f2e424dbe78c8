import json
import logging
import httpx

from typing import Dict, Optional, Any
from urllib.parse import quote

from crosslist.core.exceptions import EbayAPIError

logger = logging.getLogger(__name__)


class EbayClient:
    """
    Async client for the eBay Sell APIs used by crosslisting.

    Covers the Inventory API (inventory items, offers, publishing), the
    Fulfillment API (recent orders) and a cheap Account API call used to
    verify the token on connect. Every request goes through _make_request,
    which turns transport failures and non-2xx responses into EbayAPIError.

    Documentation: https://developer.ebay.com/api-docs/sell/static/selling-ig-landing.html
    """

    PRODUCTION_BASE_URL = "https://api.ebay.com"
    SANDBOX_BASE_URL = "https://api.sandbox.ebay.com"

    INVENTORY_API = "/sell/inventory/v1"
    FULFILLMENT_API = "/sell/fulfillment/v1"
    ACCOUNT_API = "/sell/account/v1"

    def __init__(
        self,
        access_token: str,
        sandbox: bool = False,
        marketplace_id: str = "EBAY_US",
        content_language: str = "en-US",
        timeout: float = 30.0,
    ):
        self.access_token = access_token
        self.sandbox = sandbox
        self.marketplace_id = marketplace_id
        self.content_language = content_language
        self.timeout = timeout
        self.BASE_URL = self.SANDBOX_BASE_URL if sandbox else self.PRODUCTION_BASE_URL
        logger.info(f"Initializing EbayClient with {'sandbox' if sandbox else 'production'} environment")

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests"""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Content-Language": self.content_language,
            "Accept": "application/json",
            "X-EBAY-C-MARKETPLACE-ID": self.marketplace_id,
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict:
        """
        Make a request to the eBay API

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API path (without base URL)
            data: JSON payload for POST/PUT requests
            params: Query parameters

        Returns:
            Dict: Parsed response body, {} when the response has no content

        Raises:
            EbayAPIError: If the request fails or eBay returns an error status
        """
        url = f"{self.BASE_URL}/{endpoint.lstrip('/')}"

        logger.debug(f"Making {method} request to {url}")
        if params:
            logger.debug(f"Params: {params}")
        if data:
            logger.debug(f"Data: {json.dumps(data)[:500]}...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    json=data,
                    params=params,
                )
        except httpx.TimeoutException as e:
            logger.error(f"eBay timeout error: {str(e)}")
            raise EbayAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"eBay network error: {str(e)}")
            raise EbayAPIError(f"Network error: {str(e)}")

        if response.status_code not in (200, 201, 202, 204):
            logger.error(f"eBay API error ({response.status_code}): {response.text}")
            raise EbayAPIError(self._error_message(response), status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return {}

        return response.json()

    @staticmethod
    def _error_message(response) -> str:
        """First error message from an eBay error body, else the raw text"""
        try:
            errors = response.json().get("errors") or []
        except ValueError:
            errors = []
        if errors and errors[0].get("message"):
            return errors[0]["message"]
        return f"Request failed: {response.text}"

    # Inventory items

    async def get_inventory_items(self, limit: int = 100, offset: int = 0) -> Dict:
        """Page of inventory items: {"inventoryItems": [...], "total": n, ...}"""
        return await self._make_request(
            "GET",
            f"{self.INVENTORY_API}/inventory_item",
            params={"limit": limit, "offset": offset},
        )

    async def get_inventory_item(self, sku: str) -> Dict:
        return await self._make_request("GET", f"{self.INVENTORY_API}/inventory_item/{quote(sku, safe='')}")

    async def create_or_replace_inventory_item(self, sku: str, payload: Dict[str, Any]) -> Dict:
        """
        PUT an inventory item. Creates the record when the SKU is new and
        replaces it otherwise, so this is also how quantity changes are sent.
        """
        return await self._make_request("PUT", f"{self.INVENTORY_API}/inventory_item/{quote(sku, safe='')}", data=payload)

    # Offers

    async def get_offers(self, sku: str) -> Dict:
        return await self._make_request("GET", f"{self.INVENTORY_API}/offer", params={"sku": sku})

    async def create_offer(self, payload: Dict[str, Any]) -> Dict:
        return await self._make_request("POST", f"{self.INVENTORY_API}/offer", data=payload)

    async def publish_offer(self, offer_id: str) -> Dict:
        """Publish an offer, making the listing live. Returns {"listingId": ...}"""
        return await self._make_request("POST", f"{self.INVENTORY_API}/offer/{offer_id}/publish")

    # Orders

    async def get_orders(self, since: str, limit: int = 50, offset: int = 0) -> Dict:
        """
        Orders created since an ISO-8601 timestamp.

        Args:
            since: e.g. "2024-03-01T00:00:00.000Z"
        """
        return await self._make_request(
            "GET",
            f"{self.FULFILLMENT_API}/order",
            params={"filter": f"creationdate:[{since}..]", "limit": limit, "offset": offset},
        )

    # Account

    async def get_privileges(self) -> Dict:
        return await self._make_request("GET", f"{self.ACCOUNT_API}/privilege")
