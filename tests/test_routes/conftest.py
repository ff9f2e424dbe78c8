# tests/test_routes/conftest.py
import pytest
from fastapi.testclient import TestClient

from crosslist.main import create_app
from crosslist.store import InventoryStore
from tests.conftest import FixedClock, make_item
from tests.mocks.mock_adapter import MockAdapter


def seed_items():
    """
    a: last unit, eBay listing past expiry, Etsy fresh
    b: eBay listing expiring in 3 days
    c: sold out
    d: in stock, not listed anywhere
    """
    return [
        make_item(
            "a", sku="SKU-A", qty=1, price=40.0, category="Lamps",
            platforms=["eBay", "Etsy"],
            platform_listing_dates={"eBay": "2024-04-01", "Etsy": "2024-05-28"},
            platform_listing_expiry={"eBay": "2024-05-01", "Etsy": "2024-09-25"},
        ),
        make_item(
            "b", sku="SKU-B", qty=2, price=20.0, category="Denim",
            platforms=["eBay"],
            platform_listing_dates={"eBay": "2024-05-05"},
            platform_listing_expiry={"eBay": "2024-06-04"},
        ),
        make_item("c", qty=0, platforms=["Poshmark"], platform_status={"Poshmark": "sold"},
                  platform_listing_dates={"Poshmark": "2024-03-01"}),
        make_item("d", qty=1, price=10.0),
    ]


@pytest.fixture
def app_store():
    return InventoryStore(seed_items())


@pytest.fixture
def client(settings, app_store):
    app = create_app(
        settings,
        store=app_store,
        adapter_factory=lambda s, lifecycle, store: {"Mock": MockAdapter(lifecycle, store)},
        clock=FixedClock(),
    )
    with TestClient(app) as test_client:
        yield test_client
