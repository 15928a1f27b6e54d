"""SQLAlchemy database models."""

import uuid

from sqlalchemy import Column, Integer, String, Float, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from stylist.database.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Shopper profile."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, index=True, nullable=False)
    age = Column(Integer, nullable=True)
    style_preference = Column(String, nullable=True)
    favorite_brands = Column(JSON, default=list)
    size = Column(String, nullable=True)
    loyalty_points = Column(Integer, default=0)
    loyalty_tier = Column(String, default="Bronze")
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    sessions = relationship("Session", back_populates="user")
    cart_items = relationship("CartItem", back_populates="user")
    orders = relationship("Order", back_populates="user")


class Product(Base):
    """Catalog product."""

    __tablename__ = "products"

    id = Column(String, primary_key=True, default=_uuid)
    brand = Column(String, index=True, nullable=False)
    name = Column(String, index=True, nullable=False)
    price = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)
    category = Column(String, nullable=True)
    sizes = Column(JSON, default=list)
    stock_count = Column(Integer, default=0)
    description = Column(Text, nullable=True)
    color = Column(String, nullable=True)
    occasion = Column(String, nullable=True)
    material = Column(String, nullable=True)
    rating = Column(Float, nullable=True)
    # Insertion order is the curated catalog order
    position = Column(Integer, index=True, default=0)


class Session(Base):
    """Browser/device session."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=True)
    session_id = Column(String, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="sessions")


class CartItem(Base):
    """Shopping cart row, scoped by (user, session)."""

    __tablename__ = "cart_items"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    session_id = Column(String, index=True)
    product_id = Column(String, ForeignKey("products.id"), index=True)
    quantity = Column(Integer, default=1)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="cart_items")
    product = relationship("Product")


class Order(Base):
    """Placed order."""

    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    total_amount = Column(Float, nullable=False)
    discount_applied = Column(Float, default=0.0)
    order_status = Column(String, default="confirmed")
    session_id = Column(String, index=True, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
    """Line of a placed order."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, ForeignKey("orders.id"), index=True)
    product_id = Column(String, ForeignKey("products.id"))
    quantity = Column(Integer, default=1)
    price = Column(Float)

    # Relationships
    order = relationship("Order", back_populates="items")
