"""Shopping cart scoped to one (shopper, session) pair."""

from typing import Any, Dict, List, Optional

from stylist.analytics.error_tracker import error_tracker
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.database.schemas import CartLine, OrderItemCreate, Shopper
from stylist.services.loyalty_pricing import loyalty_pricing
from stylist.utils.errors import StoreError

NOT_FOUND = {"success": False, "message": "Cart item not found"}


class CartService:
    """Cart operations for a single shopper and session.

    Mutations return ``{"success": ..., "message": ...}`` dicts. Store
    failures are reported with an ``error`` key and recorded as
    ``mutation_failed``; they are never retried automatically.
    """

    def __init__(self, repository: StoreRepository, session_id: str, shopper: Optional[Shopper]):
        self.repository = repository
        self.session_id = session_id
        self.shopper = shopper
        self.lines: List[CartLine] = []

    @property
    def user_id(self) -> Optional[str]:
        return self.shopper.id if self.shopper else None

    def _failure(self, operation: str, error: StoreError) -> Dict[str, Any]:
        error_tracker.record_error(
            "mutation_failed",
            str(error),
            {"operation": operation, "session_id": self.session_id, "user_id": self.user_id},
        )
        return {"success": False, "message": "Something went wrong. Please try again.", "error": str(error)}

    async def refresh(self) -> List[CartLine]:
        """Reload the cart from the store."""
        if not self.user_id:
            self.lines = []
            return self.lines
        self.lines = await self.repository.select_cart(self.user_id, self.session_id)
        return self.lines

    def find_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    async def add(self, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        """Add a product, incrementing the quantity if it is already in the cart."""
        if not self.user_id:
            return {"success": False, "message": "Please select a profile before adding to cart."}
        if quantity < 1:
            return {"success": False, "message": "Quantity must be at least 1."}

        try:
            await self.refresh()
            existing = self.find_line(product_id)
            if existing:
                line = await self.repository.update_cart_item(
                    self.user_id, self.session_id, existing.id, existing.quantity + quantity
                )
                if line is None:
                    raise StoreError("update cart item", f"cart item {existing.id} vanished")
                message = f"Updated quantity in cart. Total: {line.quantity}"
            else:
                line = await self.repository.insert_cart_item(
                    self.user_id, self.session_id, product_id, quantity
                )
                message = "Added to cart"
            await self.refresh()
        except StoreError as e:
            return self._failure("add", e)

        logger.info(f"Cart {self.session_id}: {message} ({product_id})")
        return {"success": True, "message": message, "cart_item_id": line.id, "quantity": line.quantity}

    async def remove(self, cart_item_id: str) -> Dict[str, Any]:
        """Remove one of this cart's lines; lines of other carts count as missing."""
        if not self.user_id:
            return dict(NOT_FOUND)
        try:
            removed = await self.repository.delete_cart_item(
                self.user_id, self.session_id, cart_item_id
            )
            await self.refresh()
        except StoreError as e:
            return self._failure("remove", e)

        if not removed:
            return dict(NOT_FOUND)
        return {"success": True, "message": "Removed from cart", "cart_item_id": cart_item_id}

    async def update_quantity(self, cart_item_id: str, quantity: int) -> Dict[str, Any]:
        """Set a line's quantity; zero or less removes it."""
        if quantity <= 0:
            return await self.remove(cart_item_id)
        if not self.user_id:
            return dict(NOT_FOUND)
        try:
            line = await self.repository.update_cart_item(
                self.user_id, self.session_id, cart_item_id, quantity
            )
            await self.refresh()
        except StoreError as e:
            return self._failure("update", e)
        if line is None:
            return dict(NOT_FOUND)
        return {"success": True, "message": f"Quantity updated to {line.quantity}", "cart_item_id": line.id}

    async def clear(self) -> Dict[str, Any]:
        if not self.user_id:
            return {"success": True, "message": "Cart is empty", "removed": 0}
        try:
            removed = await self.repository.delete_cart(self.user_id, self.session_id)
        except StoreError as e:
            return self._failure("clear", e)
        self.lines = []
        return {"success": True, "message": "Cart cleared", "removed": removed}

    async def checkout(self) -> Dict[str, Any]:
        """Place an order for the whole cart at the loyalty-discounted total.

        On success the cart is emptied and the result carries the hand-off
        data the WhatsApp continuation starts from.
        """
        if not self.user_id:
            return {"success": False, "message": "Please select a profile before checkout."}
        try:
            await self.refresh()
            if not self.lines:
                return {"success": False, "message": "Your cart is empty."}
            total = self.total()
            discount = self.loyalty_discount()
            order = await self.repository.insert_order(
                user_id=self.user_id,
                session_id=self.session_id,
                total_amount=round(total - discount, 2),
                discount_applied=discount,
                items=[
                    OrderItemCreate(
                        product_id=line.product_id,
                        quantity=line.quantity,
                        price=line.product.price if line.product else 0,
                    )
                    for line in self.lines
                ],
            )
        except StoreError as e:
            return self._failure("checkout", e)

        first = self.lines[0].product
        cleared = await self.clear()
        if not cleared["success"]:
            logger.warning(f"Order {order.id} placed but cart {self.session_id} was not cleared")

        logger.info(f"Order {order.id} placed for session {self.session_id}")
        return {
            "success": True,
            "message": "Order placed successfully!",
            "order": order.model_dump(),
            "order_data": {
                "orderId": order.id,
                "productName": first.name if first else "Product",
                "userName": self.shopper.name,
                "product": first.model_dump() if first else None,
            },
        }

    def total(self) -> float:
        return round(sum(line.line_total for line in self.lines), 2)

    def loyalty_discount(self) -> float:
        """Recomputed from the current lines on every call."""
        if not self.shopper:
            return 0.0
        return loyalty_pricing.loyalty_discount(
            self.shopper.loyalty_tier, self.shopper.loyalty_points, self.total()
        )

    async def summary(self) -> Dict[str, Any]:
        """Fresh cart contents with totals."""
        await self.refresh()
        total = self.total()
        discount = self.loyalty_discount()
        items = [
            {
                "id": line.id,
                "product_id": line.product_id,
                "product_name": line.product.name if line.product else None,
                "brand": line.product.brand if line.product else None,
                "image_url": line.product.image_url if line.product else None,
                "quantity": line.quantity,
                "price": line.product.price if line.product else 0,
                "total": round(line.line_total, 2),
            }
            for line in self.lines
        ]
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "items": items,
            "items_count": sum(line.quantity for line in self.lines),
            "total": total,
            "loyalty_discount": discount,
            "final_total": round(total - discount, 2),
        }
