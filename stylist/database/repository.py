"""Store repository: the only way the decision layer touches persisted data.

Two implementations share one interface:

- ``SqlStoreRepository`` talks to the SQLAlchemy models.
- ``InMemoryStoreRepository`` keeps everything in dicts (demo runs and tests).

Every operation may fail; failures surface as ``StoreError``.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stylist.analytics.logger import logger
from stylist.database import models
from stylist.database.db import SessionLocal
from stylist.database.schemas import CartLine, OrderItemCreate, OrderRecord, Product, Shopper
from stylist.utils.errors import StoreError


class StoreRepository:
    """Insert/update/delete/select operations against the external store."""

    # Catalog
    async def list_products(self) -> List[Product]:
        raise NotImplementedError

    async def get_product(self, product_id: str) -> Optional[Product]:
        raise NotImplementedError

    async def find_product_by_name(self, fragment: str) -> Optional[Product]:
        raise NotImplementedError

    # Shoppers
    async def list_users(self) -> List[Shopper]:
        raise NotImplementedError

    async def get_user(self, user_id: str) -> Optional[Shopper]:
        raise NotImplementedError

    async def find_user_by_name(self, fragment: str) -> Optional[Shopper]:
        raise NotImplementedError

    # Sessions
    async def touch_session(self, session_id: str, user_id: Optional[str] = None) -> None:
        raise NotImplementedError

    # Cart
    async def select_cart(self, user_id: str, session_id: str) -> List[CartLine]:
        raise NotImplementedError

    async def insert_cart_item(
        self, user_id: str, session_id: str, product_id: str, quantity: int = 1
    ) -> CartLine:
        raise NotImplementedError

    # Line mutations only touch lines of the given (user, session) cart
    async def update_cart_item(
        self, user_id: str, session_id: str, cart_item_id: str, quantity: int
    ) -> Optional[CartLine]:
        raise NotImplementedError

    async def delete_cart_item(self, user_id: str, session_id: str, cart_item_id: str) -> bool:
        raise NotImplementedError

    async def delete_cart(self, user_id: str, session_id: str) -> int:
        raise NotImplementedError

    # Orders
    async def insert_order(
        self,
        user_id: str,
        session_id: Optional[str],
        total_amount: float,
        discount_applied: float,
        items: List[OrderItemCreate],
    ) -> OrderRecord:
        raise NotImplementedError


class SqlStoreRepository(StoreRepository):
    """Repository backed by SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _run(self, operation: str, fn: Callable[[Session], object], write: bool = False):
        db = self.session_factory()
        try:
            result = fn(db)
            if write:
                db.commit()
            return result
        except SQLAlchemyError as e:
            logger.error(f"Store {operation} failed: {e}")
            if write:
                db.rollback()
            raise StoreError(operation, str(e)) from e
        finally:
            db.close()

    async def list_products(self) -> List[Product]:
        return self._run(
            "select products",
            lambda db: [
                Product.model_validate(row)
                for row in db.query(models.Product).order_by(models.Product.position).all()
            ],
        )

    async def get_product(self, product_id: str) -> Optional[Product]:
        def query(db: Session):
            row = db.query(models.Product).filter(models.Product.id == product_id).first()
            return Product.model_validate(row) if row else None

        return self._run("select product", query)

    async def find_product_by_name(self, fragment: str) -> Optional[Product]:
        def query(db: Session):
            row = (
                db.query(models.Product)
                .filter(models.Product.name.ilike(f"%{fragment}%"))
                .order_by(models.Product.position)
                .first()
            )
            return Product.model_validate(row) if row else None

        return self._run("select product by name", query)

    async def list_users(self) -> List[Shopper]:
        return self._run(
            "select users",
            lambda db: [Shopper.model_validate(row) for row in db.query(models.User).all()],
        )

    async def get_user(self, user_id: str) -> Optional[Shopper]:
        def query(db: Session):
            row = db.query(models.User).filter(models.User.id == user_id).first()
            return Shopper.model_validate(row) if row else None

        return self._run("select user", query)

    async def find_user_by_name(self, fragment: str) -> Optional[Shopper]:
        def query(db: Session):
            row = db.query(models.User).filter(models.User.name.ilike(f"%{fragment}%")).first()
            return Shopper.model_validate(row) if row else None

        return self._run("select user by name", query)

    async def touch_session(self, session_id: str, user_id: Optional[str] = None) -> None:
        def upsert(db: Session):
            row = (
                db.query(models.Session).filter(models.Session.session_id == session_id).first()
            )
            if row is None:
                db.add(models.Session(session_id=session_id, user_id=user_id))
            elif user_id and row.user_id != user_id:
                row.user_id = user_id

        self._run("upsert session", upsert, write=True)

    async def select_cart(self, user_id: str, session_id: str) -> List[CartLine]:
        def query(db: Session):
            rows = (
                db.query(models.CartItem)
                .filter(
                    models.CartItem.user_id == user_id,
                    models.CartItem.session_id == session_id,
                )
                .order_by(models.CartItem.added_at)
                .all()
            )
            return [CartLine.model_validate(row) for row in rows]

        return self._run("select cart", query)

    async def insert_cart_item(
        self, user_id: str, session_id: str, product_id: str, quantity: int = 1
    ) -> CartLine:
        def insert(db: Session):
            row = models.CartItem(
                user_id=user_id, session_id=session_id, product_id=product_id, quantity=quantity
            )
            db.add(row)
            db.flush()
            db.refresh(row)
            return CartLine.model_validate(row)

        return self._run("insert cart item", insert, write=True)

    def _cart_line_query(self, db: Session, user_id: str, session_id: str, cart_item_id: str):
        return db.query(models.CartItem).filter(
            models.CartItem.id == cart_item_id,
            models.CartItem.user_id == user_id,
            models.CartItem.session_id == session_id,
        )

    async def update_cart_item(
        self, user_id: str, session_id: str, cart_item_id: str, quantity: int
    ) -> Optional[CartLine]:
        def update(db: Session):
            row = self._cart_line_query(db, user_id, session_id, cart_item_id).first()
            if row is None:
                return None
            row.quantity = quantity
            db.flush()
            return CartLine.model_validate(row)

        return self._run("update cart item", update, write=True)

    async def delete_cart_item(self, user_id: str, session_id: str, cart_item_id: str) -> bool:
        def delete(db: Session):
            return self._cart_line_query(db, user_id, session_id, cart_item_id).delete() > 0

        return self._run("delete cart item", delete, write=True)

    async def delete_cart(self, user_id: str, session_id: str) -> int:
        return self._run(
            "delete cart",
            lambda db: db.query(models.CartItem)
            .filter(models.CartItem.user_id == user_id, models.CartItem.session_id == session_id)
            .delete(),
            write=True,
        )

    async def insert_order(
        self,
        user_id: str,
        session_id: Optional[str],
        total_amount: float,
        discount_applied: float,
        items: List[OrderItemCreate],
    ) -> OrderRecord:
        def insert(db: Session):
            order = models.Order(
                user_id=user_id,
                session_id=session_id,
                total_amount=total_amount,
                discount_applied=discount_applied,
                order_status="confirmed",
            )
            db.add(order)
            db.flush()
            for item in items:
                db.add(
                    models.OrderItem(
                        order_id=order.id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                        price=item.price,
                    )
                )
            db.flush()
            db.refresh(order)
            return OrderRecord.model_validate(order)

        return self._run("insert order", insert, write=True)


class InMemoryStoreRepository(StoreRepository):
    """Repository that keeps the store in process memory."""

    def __init__(
        self,
        products: Optional[Iterable[Product]] = None,
        users: Optional[Iterable[Shopper]] = None,
    ):
        self.products: Dict[str, Product] = {p.id: p for p in products or []}
        self.users: Dict[str, Shopper] = {u.id: u for u in users or []}
        self.sessions: Dict[str, Optional[str]] = {}
        self.cart: Dict[str, CartLine] = {}
        self.orders: Dict[str, OrderRecord] = {}
        self.order_items: Dict[str, List[OrderItemCreate]] = {}

    async def list_products(self) -> List[Product]:
        return list(self.products.values())

    async def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    async def find_product_by_name(self, fragment: str) -> Optional[Product]:
        fragment = fragment.lower()
        return next((p for p in self.products.values() if fragment in p.name.lower()), None)

    async def list_users(self) -> List[Shopper]:
        return list(self.users.values())

    async def get_user(self, user_id: str) -> Optional[Shopper]:
        return self.users.get(user_id)

    async def find_user_by_name(self, fragment: str) -> Optional[Shopper]:
        fragment = fragment.lower()
        return next((u for u in self.users.values() if fragment in u.name.lower()), None)

    async def touch_session(self, session_id: str, user_id: Optional[str] = None) -> None:
        if user_id or session_id not in self.sessions:
            self.sessions[session_id] = user_id

    async def select_cart(self, user_id: str, session_id: str) -> List[CartLine]:
        return [
            line.model_copy(update={"product": self.products.get(line.product_id)})
            for line in self.cart.values()
            if line.user_id == user_id and line.session_id == session_id
        ]

    async def insert_cart_item(
        self, user_id: str, session_id: str, product_id: str, quantity: int = 1
    ) -> CartLine:
        if product_id not in self.products:
            raise StoreError("insert cart item", f"unknown product {product_id}")
        line = CartLine(
            id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=session_id,
            product_id=product_id,
            quantity=quantity,
            product=self.products[product_id],
        )
        self.cart[line.id] = line
        return line

    def _owned_line(self, user_id: str, session_id: str, cart_item_id: str) -> Optional[CartLine]:
        line = self.cart.get(cart_item_id)
        if line is None or line.user_id != user_id or line.session_id != session_id:
            return None
        return line

    async def update_cart_item(
        self, user_id: str, session_id: str, cart_item_id: str, quantity: int
    ) -> Optional[CartLine]:
        line = self._owned_line(user_id, session_id, cart_item_id)
        if line is None:
            return None
        updated = line.model_copy(update={"quantity": quantity})
        self.cart[cart_item_id] = updated
        return updated

    async def delete_cart_item(self, user_id: str, session_id: str, cart_item_id: str) -> bool:
        if self._owned_line(user_id, session_id, cart_item_id) is None:
            return False
        del self.cart[cart_item_id]
        return True

    async def delete_cart(self, user_id: str, session_id: str) -> int:
        doomed = [
            key
            for key, line in self.cart.items()
            if line.user_id == user_id and line.session_id == session_id
        ]
        for key in doomed:
            del self.cart[key]
        return len(doomed)

    async def insert_order(
        self,
        user_id: str,
        session_id: Optional[str],
        total_amount: float,
        discount_applied: float,
        items: List[OrderItemCreate],
    ) -> OrderRecord:
        order = OrderRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=session_id,
            total_amount=total_amount,
            discount_applied=discount_applied,
            created_at=datetime.now(timezone.utc),
        )
        self.orders[order.id] = order
        self.order_items[order.id] = list(items)
        return order
