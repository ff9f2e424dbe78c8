# tests/unit/integrations/test_setup.py
import pytest

from crosslist.core.config import Settings
from crosslist.integrations.platforms.ebay import EbayAdapter
from crosslist.integrations.platforms.etsy import EtsyAdapter
from crosslist.integrations.setup import build_adapters, connect_adapters
from tests.mocks.mock_adapter import MockAdapter


def test_builds_configured_marketplaces(settings, lifecycle, store):
    adapters = build_adapters(settings, lifecycle, store)

    assert set(adapters) == {"eBay", "Etsy"}
    assert isinstance(adapters["eBay"], EbayAdapter)
    assert isinstance(adapters["Etsy"], EtsyAdapter)
    assert adapters["Etsy"].client.shop_id == "12345"
    assert all(not a.connected for a in adapters.values())


def test_etsy_needs_all_credentials(lifecycle, store):
    settings = Settings(ETSY_API_KEY="k", ETSY_ACCESS_TOKEN="t")
    assert build_adapters(settings, lifecycle, store) == {}


def test_ebay_sandbox(lifecycle, store):
    settings = Settings(EBAY_ACCESS_TOKEN="t", EBAY_SANDBOX_MODE=True)
    adapter = build_adapters(settings, lifecycle, store)["eBay"]
    assert adapter.client.BASE_URL == "https://api.sandbox.ebay.com"


@pytest.mark.asyncio
async def test_connect_failure_leaves_others_connected(lifecycle, store):
    good = MockAdapter(lifecycle, store, platform="Good")
    bad = MockAdapter(lifecycle, store, platform="Bad")
    bad.fail_connect = True

    await connect_adapters({"Bad": bad, "Good": good})

    assert good.connected is True
    assert bad.connected is False
