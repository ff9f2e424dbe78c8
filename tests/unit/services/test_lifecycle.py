# tests/unit/services/test_lifecycle.py
from datetime import date, timedelta

import pytest

from crosslist.core.enums import ListingStatus, PriceSource
from crosslist.core.exceptions import InvalidStatusError, ItemNotFoundError, ListingValidationError
from tests.conftest import TODAY, make_item


"""
1. Status normalisation and direct writes
"""

def test_listed_platforms_get_explicit_active_status():
    item = make_item(platforms=["eBay", "Etsy"], platform_status={"Etsy": "draft"})
    assert item.platform_status == {"eBay": ListingStatus.ACTIVE, "Etsy": ListingStatus.DRAFT}


def test_duplicate_platforms_are_collapsed():
    item = make_item(platforms=["eBay", "eBay", "Etsy"])
    assert item.platforms == ["eBay", "Etsy"]


def test_set_status_writes_and_marks_dirty(lifecycle, store, add_item):
    add_item(platforms=["eBay"])
    store._dirty.clear()

    item = lifecycle.set_status("item-1", "eBay", "delisted")

    assert item.platform_status["eBay"] is ListingStatus.DELISTED
    assert "item-1" in store.dirty_ids


def test_set_status_rejects_unknown_status(lifecycle, add_item):
    add_item(platforms=["eBay"])
    with pytest.raises(InvalidStatusError):
        lifecycle.set_status("item-1", "eBay", "archived")
    assert lifecycle.store.get("item-1").platform_status["eBay"] is ListingStatus.ACTIVE


def test_missing_item_raises(lifecycle):
    with pytest.raises(ItemNotFoundError):
        lifecycle.set_status("nope", "eBay", ListingStatus.SOLD)
    with pytest.raises(ItemNotFoundError):
        lifecycle.relist("nope", "eBay")


def test_empty_platform_rejected(lifecycle, add_item):
    add_item()
    with pytest.raises(ValueError):
        lifecycle.set_listing_date("item-1", "", TODAY)


def test_status_writes_require_platform_membership(lifecycle, add_item):
    add_item(platforms=["eBay"], platform_status={"Etsy": "delisted"})

    with pytest.raises(ListingValidationError):
        lifecycle.set_status("item-1", "Etsy", ListingStatus.ACTIVE)
    with pytest.raises(ListingValidationError):
        lifecycle.relist("item-1", "Etsy")

    item = lifecycle.store.get("item-1")
    assert item.platform_status["Etsy"] is ListingStatus.DELISTED
    assert "Etsy" not in item.last_relisted


"""
2. Listing dates, relist and platform membership
"""

def test_set_listing_date_stores_date_and_expiry(lifecycle, add_item):
    add_item(platforms=["eBay"])

    expiry = lifecycle.set_listing_date("item-1", "eBay", "2024-05-10")

    item = lifecycle.store.get("item-1")
    assert item.platform_listing_dates["eBay"] == date(2024, 5, 10)
    assert expiry == item.platform_listing_expiry["eBay"] == date(2024, 6, 9)


def test_set_listing_date_defaults_to_today(lifecycle, add_item):
    add_item(platforms=["Etsy"])
    lifecycle.set_listing_date("item-1", "Etsy")
    assert lifecycle.store.get("item-1").platform_listing_dates["Etsy"] == TODAY


def test_no_expiry_platform_clears_stored_expiry(lifecycle, add_item):
    add_item(platforms=["Poshmark"], platform_listing_expiry={"Poshmark": date(2024, 1, 1)})

    assert lifecycle.set_listing_date("item-1", "Poshmark", TODAY) is None
    assert "Poshmark" not in lifecycle.store.get("item-1").platform_listing_expiry


def test_relist_resets_clock_and_status(lifecycle, add_item):
    add_item(platforms=["eBay"], platform_status={"eBay": "expired"})
    lifecycle.set_listing_date("item-1", "eBay", TODAY - timedelta(days=40))

    item = lifecycle.relist("item-1", "eBay")

    assert item.platform_status["eBay"] is ListingStatus.ACTIVE
    assert item.platform_listing_dates["eBay"] == TODAY
    assert item.platform_listing_expiry["eBay"] == TODAY + timedelta(days=30)
    assert item.last_relisted["eBay"] == TODAY


def test_mark_listed_does_not_record_relist(lifecycle, add_item):
    add_item(platforms=["eBay"], platform_status={"eBay": "draft"})
    item = lifecycle.mark_listed("item-1", "eBay")
    assert item.platform_status["eBay"] is ListingStatus.ACTIVE
    assert "eBay" not in item.last_relisted


def test_add_platform_initialises_new_platform(lifecycle, add_item):
    add_item()
    item = lifecycle.add_platform("item-1", "Etsy")

    assert item.platforms == ["Etsy"]
    assert item.platform_status["Etsy"] is ListingStatus.ACTIVE
    assert item.platform_listing_dates["Etsy"] == TODAY
    assert item.platform_listing_expiry["Etsy"] == TODAY + timedelta(days=120)


def test_remove_then_re_add_keeps_old_fields(lifecycle, add_item):
    add_item(platforms=["eBay", "Etsy"])
    lifecycle.set_listing_date("item-1", "eBay", date(2024, 1, 1))
    lifecycle.set_status("item-1", "eBay", ListingStatus.EXPIRED)

    item = lifecycle.remove_platform("item-1", "eBay")
    assert item.platforms == ["Etsy"]
    assert item.platform_status["eBay"] is ListingStatus.EXPIRED

    item = lifecycle.add_platform("item-1", "eBay")
    assert item.platform_status["eBay"] is ListingStatus.EXPIRED
    assert item.platform_listing_dates["eBay"] == date(2024, 1, 1)


def test_removed_platform_is_ignored_by_scans(lifecycle, add_item):
    add_item(platforms=["eBay"])
    lifecycle.set_listing_date("item-1", "eBay", date(2024, 1, 1))
    lifecycle.remove_platform("item-1", "eBay")

    assert lifecycle.expired_listings() == []
    assert lifecycle.sweep_expired() == 0


def test_init_listing_dates_backfills_from_added(lifecycle, add_item):
    add_item("a", platforms=["eBay"], added=date(2024, 5, 20))
    add_item("b", platforms=["Etsy"])
    add_item("c", platforms=["eBay"], platform_listing_dates={"eBay": date(2024, 5, 30)})
    add_item("d")

    assert lifecycle.init_listing_dates() == 2
    store = lifecycle.store
    assert store.get("a").platform_listing_dates["eBay"] == date(2024, 5, 20)
    assert store.get("a").platform_listing_expiry["eBay"] == date(2024, 6, 19)
    assert store.get("b").platform_listing_dates["Etsy"] == TODAY
    assert store.get("c").platform_listing_dates["eBay"] == date(2024, 5, 30)
    assert lifecycle.init_listing_dates() == 0


"""
3. Sales and the sold-elsewhere cascade
"""

def test_sale_with_stock_left_does_not_cascade(lifecycle, add_item):
    add_item(qty=2, platforms=["eBay", "Etsy"])

    result = lifecycle.record_sale("item-1", "eBay")

    item = lifecycle.store.get("item-1")
    assert result.qty_remaining == 1
    assert result.cascaded == []
    assert item.platform_status["eBay"] is ListingStatus.SOLD
    assert item.platform_status["Etsy"] is ListingStatus.ACTIVE


def test_last_unit_sale_cascades_to_active_listings(lifecycle, add_item):
    add_item(qty=2, platforms=["eBay", "Etsy"])
    lifecycle.record_sale("item-1", "eBay")

    result = lifecycle.record_sale("item-1", "eBay")

    item = lifecycle.store.get("item-1")
    assert result.qty_remaining == 0
    assert result.cascaded == ["Etsy"]
    assert item.platform_status["eBay"] is ListingStatus.SOLD
    assert item.platform_status["Etsy"] is ListingStatus.SOLD_ELSEWHERE


def test_on_sale_after_stock_reaches_zero(lifecycle, add_item):
    item = add_item(qty=2, platforms=["eBay", "Etsy"])
    item.qty = 1
    assert lifecycle.on_sale("item-1", "eBay") == []

    item.qty = 0
    assert lifecycle.on_sale("item-1", "eBay") == ["Etsy"]
    assert item.platform_status["Etsy"] is ListingStatus.SOLD_ELSEWHERE


def test_cascade_only_touches_active_listings(lifecycle, add_item):
    add_item(
        qty=1,
        platforms=["eBay", "Etsy", "Poshmark", "Mercari", "Depop"],
        platform_status={"Poshmark": "delisted", "Mercari": "expired", "Depop": "draft"},
    )

    result = lifecycle.record_sale("item-1", "eBay")

    item = lifecycle.store.get("item-1")
    assert result.cascaded == ["Etsy"]
    assert item.platform_status["Poshmark"] is ListingStatus.DELISTED
    assert item.platform_status["Mercari"] is ListingStatus.EXPIRED
    assert item.platform_status["Depop"] is ListingStatus.DRAFT


def test_oversell_floors_qty_at_zero(lifecycle, add_item):
    add_item(qty=1, platforms=["eBay"])
    assert lifecycle.record_sale("item-1", "eBay", quantity=3).qty_remaining == 0


def test_record_sale_logs_sale_price(lifecycle, add_item):
    add_item(qty=1, platforms=["Etsy"])
    lifecycle.record_sale("item-1", "Etsy", price=42.5)

    history = lifecycle.price_history.get_history("item-1", PriceSource.SOLD)
    assert len(history) == 1
    assert history[0].price == 42.5
    assert history[0].platform == "Etsy"


def test_record_sale_rejects_zero_quantity(lifecycle, add_item):
    add_item(qty=1, platforms=["eBay"])
    with pytest.raises(ValueError):
        lifecycle.record_sale("item-1", "eBay", quantity=0)
    assert lifecycle.store.get("item-1").qty == 1


def test_sale_on_unlisted_platform_changes_nothing(lifecycle, add_item):
    add_item(qty=1, platforms=["eBay"])
    with pytest.raises(ListingValidationError):
        lifecycle.record_sale("item-1", "Etsy", price=10.0)

    item = lifecycle.store.get("item-1")
    assert item.qty == 1
    assert item.price_history == []
    assert item.external_refs == {}


def test_manual_sales_are_tallied_per_platform(lifecycle, add_item):
    add_item(qty=5, platforms=["eBay", "Etsy"])
    lifecycle.record_sale("item-1", "eBay")
    lifecycle.record_sale("item-1", "eBay", quantity=2)
    lifecycle.record_sale("item-1", "Etsy", manual=False)

    item = lifecycle.store.get("item-1")
    assert item.qty == 1
    assert item.external_refs["eBay"]["manual_sales"] == 3
    assert "Etsy" not in item.external_refs


"""
4. Expiry scans and the sweep
"""

def test_expired_listing_is_swept_and_still_reported(lifecycle, add_item):
    add_item(platforms=["eBay"])
    lifecycle.set_listing_date("item-1", "eBay", TODAY - timedelta(days=31))

    assert lifecycle.sweep_expired() == 1

    item = lifecycle.store.get("item-1")
    assert item.platform_status["eBay"] is ListingStatus.EXPIRED
    assert lifecycle.expiring_listings(warning_days=7) == []
    expired = lifecycle.expired_listings()
    assert len(expired) == 1
    assert expired[0].listed_date == TODAY - timedelta(days=31)
    assert expired[0].days_left == -1


def test_sweep_is_idempotent(lifecycle, add_item):
    add_item(platforms=["eBay", "Etsy"])
    lifecycle.set_listing_date("item-1", "eBay", TODAY - timedelta(days=60))
    lifecycle.set_listing_date("item-1", "Etsy", TODAY - timedelta(days=10))

    assert lifecycle.sweep_expired() == 1
    assert lifecycle.sweep_expired() == 0
    assert lifecycle.store.get("item-1").platform_status["Etsy"] is ListingStatus.ACTIVE


def test_listing_expiring_today_is_not_expired(lifecycle, add_item):
    add_item(platforms=["eBay"])
    lifecycle.set_listing_date("item-1", "eBay", TODAY - timedelta(days=30))

    assert lifecycle.expired_listings() == []
    expiring = lifecycle.expiring_listings()
    assert [(e.item_id, e.days_left) for e in expiring] == [("item-1", 0)]


def test_non_expiring_platform_never_reported(lifecycle, add_item):
    add_item(platforms=["Poshmark"])
    lifecycle.set_listing_date("item-1", "Poshmark", date(2019, 1, 1))

    assert lifecycle.expired_listings() == []
    assert lifecycle.expiring_listings(warning_days=10000) == []
    assert lifecycle.days_until_expiry("item-1", "Poshmark") is None


def test_sold_listings_are_not_expired(lifecycle, add_item):
    add_item(platforms=["eBay"], platform_status={"eBay": "sold"})
    lifecycle.set_listing_date("item-1", "eBay", TODAY - timedelta(days=90))

    assert lifecycle.expired_listings() == []
    assert lifecycle.sweep_expired() == 0


def test_expiring_listings_window_and_order(lifecycle, add_item, clock):
    add_item("b", platforms=["eBay", "Etsy"])
    add_item("a", platforms=["eBay"])
    add_item("c", platforms=["eBay"], platform_status={"eBay": "delisted"})
    lifecycle.set_listing_date("b", "eBay", TODAY - timedelta(days=25))      # 5 days left
    lifecycle.set_listing_date("b", "Etsy", TODAY - timedelta(days=117))     # 3 days left
    lifecycle.set_listing_date("a", "eBay", TODAY - timedelta(days=25))      # 5 days left
    lifecycle.set_listing_date("c", "eBay", TODAY - timedelta(days=29))      # not active

    expiring = lifecycle.expiring_listings(warning_days=7)

    assert [(e.item_id, e.platform, e.days_left) for e in expiring] == [
        ("b", "Etsy", 3),
        ("a", "eBay", 5),
        ("b", "eBay", 5),
    ]
    assert lifecycle.expiring_listings(warning_days=4)[0].platform == "Etsy"
    assert len(lifecycle.expiring_listings(warning_days=4)) == 1


def test_clock_drives_expiry(lifecycle, add_item, clock):
    add_item(platforms=["Facebook Marketplace"])
    lifecycle.set_listing_date("item-1", "Facebook Marketplace")

    assert lifecycle.days_until_expiry("item-1", "Facebook Marketplace") == 7
    clock.advance(8)
    assert lifecycle.sweep_expired() == 1
