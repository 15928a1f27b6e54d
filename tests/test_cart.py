"""Tests for the session cart and loyalty-priced checkout."""
from unittest.mock import AsyncMock, patch

import pytest

from stylist.analytics.error_tracker import error_tracker
from stylist.utils.errors import StoreError


@pytest.mark.asyncio
async def test_add_to_cart_with_loyalty_pricing(repository, make_context):
    context = await make_context(repository, "user-priya")
    cart = context.cart

    result = await cart.add("prod-w-white-floral-top")
    summary = await cart.summary()

    assert result["success"] is True
    assert result["message"] == "Added to cart"
    assert summary["items_count"] == 1
    assert summary["total"] == 1299
    assert summary["loyalty_discount"] == pytest.approx(389.7)
    assert summary["final_total"] == pytest.approx(909.3)


@pytest.mark.asyncio
async def test_adding_same_product_increments_quantity(repository, make_context):
    cart = (await make_context(repository, "user-rohan")).cart

    await cart.add("prod-lp-black-trousers")
    result = await cart.add("prod-lp-black-trousers")

    assert result["message"] == "Updated quantity in cart. Total: 2"
    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2
    assert cart.total() == 5198


@pytest.mark.asyncio
async def test_add_then_remove_restores_cart(repository, make_context):
    cart = (await make_context(repository, "user-rohan")).cart
    await cart.add("prod-as-blue-shirt")
    before = await cart.summary()

    added = await cart.add("prod-lp-black-trousers")
    removed = await cart.remove(added["cart_item_id"])
    after = await cart.summary()

    assert removed["success"] is True
    assert after["items"] == before["items"]
    assert after["final_total"] == before["final_total"]


@pytest.mark.asyncio
async def test_loyalty_discount_recomputed_after_changes(repository, make_context):
    cart = (await make_context(repository, "user-rohan")).cart
    added = await cart.add("prod-lp-black-trousers")
    assert cart.loyalty_discount() == pytest.approx(519.8)

    await cart.update_quantity(added["cart_item_id"], 3)

    # Silver rate would allow 1559.4; capped by 1200 points
    assert cart.loyalty_discount() == 1200


@pytest.mark.asyncio
async def test_update_quantity_to_zero_removes_line(repository, make_context):
    cart = (await make_context(repository, "user-aarav")).cart
    added = await cart.add("prod-bwk-oversized-tee")

    result = await cart.update_quantity(added["cart_item_id"], 0)

    assert result["success"] is True
    assert cart.lines == []


@pytest.mark.asyncio
async def test_remove_unknown_line(repository, make_context):
    cart = (await make_context(repository, "user-aarav")).cart

    result = await cart.remove("missing")

    assert result == {"success": False, "message": "Cart item not found"}


@pytest.mark.asyncio
async def test_other_session_cannot_touch_line(repository, make_context):
    priya_cart = (await make_context(repository, "user-priya", session_id="SES-PRIYA")).cart
    added = await priya_cart.add("prod-aurelia-kurta")
    line_id = added["cart_item_id"]

    rohan_cart = (await make_context(repository, "user-rohan", session_id="SES-ROHAN")).cart
    same_shopper_cart = (await make_context(repository, "user-priya", session_id="SES-PHONE")).cart

    assert (await rohan_cart.update_quantity(line_id, 5))["success"] is False
    assert (await rohan_cart.remove(line_id))["success"] is False
    assert (await same_shopper_cart.update_quantity(line_id, 0))["success"] is False

    await priya_cart.refresh()
    assert [(line.id, line.quantity) for line in priya_cart.lines] == [(line_id, 1)]


@pytest.mark.asyncio
async def test_add_without_shopper(repository, make_context):
    cart = (await make_context(repository, None)).cart

    result = await cart.add("prod-bwk-oversized-tee")

    assert result["success"] is False
    assert "select a profile" in result["message"]
    assert repository.cart == {}


@pytest.mark.asyncio
async def test_store_failure_reported_not_retried(repository, make_context):
    cart = (await make_context(repository, "user-aarav")).cart

    with patch.object(
        repository,
        "insert_cart_item",
        new_callable=AsyncMock,
        side_effect=StoreError("insert cart item", "connection reset"),
    ) as mock_insert:
        result = await cart.add("prod-bwk-oversized-tee")

    assert result["success"] is False
    assert "connection reset" in result["error"]
    assert mock_insert.await_count == 1
    assert error_tracker.get_error_stats()["error_types"] == {"mutation_failed": 1}


@pytest.mark.asyncio
async def test_checkout_places_discounted_order_and_clears_cart(repository, make_context):
    cart = (await make_context(repository, "user-priya")).cart
    await cart.add("prod-w-white-floral-top")
    await cart.add("prod-aurelia-kurta")

    result = await cart.checkout()

    assert result["success"] is True
    order = repository.orders[result["order"]["id"]]
    # 3198 total, Gold 30% cap of 959.4 is below 3500 points
    assert order.total_amount == pytest.approx(2238.6)
    assert order.discount_applied == pytest.approx(959.4)
    assert len(repository.order_items[order.id]) == 2
    assert result["order_data"]["orderId"] == order.id
    assert result["order_data"]["userName"] == "Priya Sharma"
    assert result["order_data"]["productName"] == "W White Floral Printed Round Neck Top"
    assert await cart.refresh() == []


@pytest.mark.asyncio
async def test_checkout_empty_cart(repository, make_context):
    cart = (await make_context(repository, "user-priya")).cart

    result = await cart.checkout()

    assert result == {"success": False, "message": "Your cart is empty."}
    assert repository.orders == {}


@pytest.mark.asyncio
async def test_carts_are_scoped_by_session(repository, make_context):
    first = (await make_context(repository, "user-rohan", session_id="SES-A")).cart
    second = (await make_context(repository, "user-rohan", session_id="SES-B")).cart

    await first.add("prod-as-blue-shirt")

    assert await second.refresh() == []
