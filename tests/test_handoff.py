"""Tests for kiosk and mobile hand-off parsing."""
import json
from urllib.parse import quote

import pytest

from stylist.analytics.error_tracker import error_tracker
from stylist.memory.handoff import HandoffProduct, decode_query_data, parse_handoff
from stylist.utils.errors import HandoffError


def _query(data):
    return quote(json.dumps(data))


def test_kiosk_query_parameter():
    handoff = parse_handoff(
        _query(
            {
                "orderId": "ORD-1001",
                "productName": "Allen Solly Blue Formal Shirt",
                "userName": "Rohan Kapoor",
                "product": {"id": "prod-as-blue-shirt", "brand": "Allen Solly", "category": "Shirts"},
            }
        )
    )

    assert handoff.from_kiosk is True
    assert handoff.order_id == "ORD-1001"
    assert handoff.user_name == "Rohan Kapoor"
    assert handoff.product.id == "prod-as-blue-shirt"
    assert handoff.product.is_complete


def test_query_wins_over_navigation_state():
    handoff = parse_handoff(
        _query({"orderId": "ORD-Q"}), {"orderData": {"orderId": "ORD-NAV"}}
    )

    assert handoff.order_id == "ORD-Q"


def test_mobile_navigation_state():
    handoff = parse_handoff(
        None,
        {
            "orderData": {
                "orderId": 12345,
                "productName": "Aurelia Floral Embroidered Kurta",
                "userName": "Priya Sharma",
            }
        },
    )

    assert handoff.from_kiosk is False
    assert handoff.order_id == "12345"
    assert handoff.product_name == "Aurelia Floral Embroidered Kurta"
    assert handoff.product is None


def test_flat_navigation_state():
    handoff = parse_handoff(
        None,
        {
            "orderId": "ORD-7",
            "userName": "Aarav Mehta",
            "fromKiosk": True,
            "product": {"name": "Bewakoof Oversized Graphic Tee"},
        },
    )

    assert handoff.from_kiosk is True
    assert handoff.product_name == "Bewakoof Oversized Graphic Tee"
    assert not handoff.product.is_complete


def test_malformed_query_falls_back_to_navigation_state():
    handoff = parse_handoff("%7Bnot-json", {"orderData": {"orderId": "ORD-NAV"}})

    assert handoff.order_id == "ORD-NAV"
    assert error_tracker.get_error_stats()["error_types"] == {"malformed_handoff": 1}


def test_missing_everything():
    handoff = parse_handoff(None, None)

    assert handoff.order_id is None
    assert handoff.user_name is None
    assert handoff.product is None
    assert handoff.from_kiosk is False


def test_unreadable_fields_become_none():
    handoff = parse_handoff(
        _query({"orderId": "", "userName": ["not", "a", "name"], "product": {"price": "free"}})
    )

    assert handoff.order_id is None
    assert handoff.user_name is None
    assert handoff.product is None


def test_decode_query_data_requires_object():
    assert decode_query_data(_query({"a": 1})) == {"a": 1}
    with pytest.raises(HandoffError):
        decode_query_data(_query([1, 2]))
    with pytest.raises(HandoffError):
        decode_query_data("not json")


def test_handoff_product_completeness():
    assert HandoffProduct(brand="W", category="Tops").is_complete
    assert not HandoffProduct(name="W White Floral Printed Round Neck Top").is_complete
