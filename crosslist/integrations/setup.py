"""
Builds the marketplace adapters from application settings.

Only marketplaces whose credentials are present get an adapter. Adapters are
created disconnected; connect_adapters() connects them at startup and a
failure there is logged, leaving that adapter disconnected.
"""

import logging
from typing import Dict

from crosslist.core.config import Settings
from crosslist.integrations.base import MarketplaceAdapter
from crosslist.integrations.platforms.ebay import EbayAdapter
from crosslist.integrations.platforms.etsy import EtsyAdapter
from crosslist.services.ebay.client import EbayClient
from crosslist.services.etsy.client import EtsyClient
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.store import InventoryStore

logger = logging.getLogger(__name__)


def build_adapters(
    settings: Settings,
    lifecycle: ListingLifecycleService,
    store: InventoryStore,
) -> Dict[str, MarketplaceAdapter]:
    adapters: Dict[str, MarketplaceAdapter] = {}

    if settings.ebay_configured:
        client = EbayClient(
            access_token=settings.EBAY_ACCESS_TOKEN,
            sandbox=settings.EBAY_SANDBOX_MODE,
            marketplace_id=settings.EBAY_MARKETPLACE_ID,
            content_language=settings.EBAY_CONTENT_LANGUAGE,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        adapter = EbayAdapter(lifecycle, store, client, settings)
        adapters[adapter.platform] = adapter
        logger.info("Registered eBay adapter")

    if settings.etsy_configured:
        client = EtsyClient(
            api_key=settings.ETSY_API_KEY,
            access_token=settings.ETSY_ACCESS_TOKEN,
            shop_id=settings.ETSY_SHOP_ID,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        adapter = EtsyAdapter(lifecycle, store, client, settings)
        adapters[adapter.platform] = adapter
        logger.info("Registered Etsy adapter")

    if not adapters:
        logger.warning("No marketplace credentials configured; sync adapters disabled")
    return adapters


async def connect_adapters(adapters: Dict[str, MarketplaceAdapter]) -> None:
    for platform, adapter in adapters.items():
        try:
            await adapter.connect()
        except Exception as e:
            logger.error(f"Failed to connect {platform} adapter: {e}")
