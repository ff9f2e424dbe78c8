import json
import logging
import httpx

from typing import Dict, Optional, Any

from crosslist.core.exceptions import EtsyAPIError

logger = logging.getLogger(__name__)


class EtsyClient:
    """
    Async client for the Etsy Open API v3, scoped to one shop.

    Requests carry both the application key (x-api-key) and the shop owner's
    OAuth token. Errors come back as EtsyAPIError.

    Documentation: https://developers.etsy.com/documentation/reference
    """

    BASE_URL = "https://openapi.etsy.com/v3"

    def __init__(self, api_key: str, access_token: str, shop_id: str, timeout: float = 30.0):
        self.api_key = api_key
        self.access_token = access_token
        self.shop_id = shop_id
        self.timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict:
        """
        Make a request to the Etsy API

        Raises:
            EtsyAPIError: If the request fails or Etsy returns an error status
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
            logger.error(f"Etsy timeout error: {str(e)}")
            raise EtsyAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Etsy network error: {str(e)}")
            raise EtsyAPIError(f"Network error: {str(e)}")

        if response.status_code not in (200, 201, 202, 204):
            logger.error(f"Etsy API error ({response.status_code}): {response.text}")
            raise EtsyAPIError(self._error_message(response), status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return {}

        return response.json()

    @staticmethod
    def _error_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"Request failed: {response.text}"

    # Shop

    async def get_shop(self) -> Dict:
        return await self._make_request("GET", f"/application/shops/{self.shop_id}")

    # Listings

    async def get_listings(self, state: str = "active", limit: int = 100, offset: int = 0) -> Dict:
        """Page of shop listings with images: {"count": n, "results": [...]}"""
        return await self._make_request(
            "GET",
            f"/application/shops/{self.shop_id}/listings",
            params={"state": state, "limit": limit, "offset": offset, "includes": "Images"},
        )

    async def create_listing(self, payload: Dict[str, Any]) -> Dict:
        return await self._make_request("POST", f"/application/shops/{self.shop_id}/listings", data=payload)

    async def update_listing(self, listing_id: str, updates: Dict[str, Any]) -> Dict:
        """PATCH a listing; also how state changes (active / inactive) are made."""
        return await self._make_request(
            "PATCH",
            f"/application/shops/{self.shop_id}/listings/{listing_id}",
            data=updates,
        )

    # Receipts

    async def get_receipts(self, min_created: int, limit: int = 50, offset: int = 0) -> Dict:
        """
        Receipts (orders) created at or after `min_created`, a Unix timestamp.
        Each receipt carries its transactions, one per listing sold.
        """
        return await self._make_request(
            "GET",
            f"/application/shops/{self.shop_id}/receipts",
            params={"min_created": min_created, "limit": limit, "offset": offset},
        )
