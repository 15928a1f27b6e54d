"""Tests for mock in-store availability."""
from stylist.services.store_inventory import availability_summary, stores_with_stock


def test_stores_with_stock_nearest_first():
    stores = stores_with_stock("prod-w-white-floral-top", "M")

    assert [s.id for s in stores] == ["store-1", "store-5", "store-2", "store-4"]
    assert all(s.stock > 0 for s in stores)


def test_availability_summary():
    summary = availability_summary("prod-w-white-floral-top", "M")

    assert summary["product_id"] == "prod-w-white-floral-top"
    assert summary["size"] == "M"
    assert summary["total_stock"] == 11
    assert summary["stores"][0]["name"] == "Forum Mall"
