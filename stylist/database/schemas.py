"""Pydantic schemas for the catalog, shoppers, carts and orders.

These are the immutable views the decision layer works with. They are built
from ORM rows (``from_attributes``) or plain dicts and never written back.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime


# Product Schemas
class Product(BaseModel):
    id: str
    brand: str
    name: str
    price: float = Field(ge=0)
    image_url: Optional[str] = None
    category: Optional[str] = None
    sizes: List[str] = Field(default_factory=list)
    stock_count: int = Field(default=0, ge=0)
    description: Optional[str] = None
    color: Optional[str] = None
    occasion: Optional[str] = None
    material: Optional[str] = None
    rating: Optional[float] = None

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("sizes", mode="before")
    @classmethod
    def _null_sizes_are_empty(cls, value):
        return value or []


class RecommendationConfig(BaseModel):
    cross_brand: bool = True
    time_limited: bool = True
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)
    expires_in: Optional[int] = Field(default=None, gt=0)  # minutes

    class Config:
        frozen = True


class RecommendedProduct(Product):
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)
    expires_in: Optional[int] = Field(default=None, gt=0)  # minutes
    recommendation_reason: Optional[str] = None

    @model_validator(mode="after")
    def _discount_needs_expiry(self):
        if self.discount_percent is not None and self.expires_in is None:
            raise ValueError("a discounted recommendation must carry expires_in")
        return self

    @classmethod
    def from_product(
        cls,
        product: Product,
        discount_percent: Optional[float] = None,
        expires_in: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> "RecommendedProduct":
        data = product.model_dump()
        for key in ("discount_percent", "expires_in", "recommendation_reason"):
            data.pop(key, None)
        return cls(
            **data,
            discount_percent=discount_percent,
            expires_in=expires_in,
            recommendation_reason=reason,
        )

    @property
    def is_time_limited(self) -> bool:
        return self.discount_percent is not None and self.expires_in is not None


# Shopper Schemas
class Shopper(BaseModel):
    id: str
    name: str
    age: Optional[int] = None
    style_preference: Optional[str] = None
    favorite_brands: List[str] = Field(default_factory=list)
    size: Optional[str] = None
    loyalty_tier: str = "Bronze"
    loyalty_points: int = Field(default=0, ge=0)
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("favorite_brands", mode="before")
    @classmethod
    def _null_brands_are_empty(cls, value):
        return value or []


# Cart Schemas
class CartLine(BaseModel):
    id: str
    user_id: str
    session_id: str
    product_id: str
    quantity: int = Field(ge=1)
    product: Optional[Product] = None

    class Config:
        from_attributes = True
        frozen = True

    @property
    def line_total(self) -> float:
        return (self.product.price if self.product else 0) * self.quantity


# Order Schemas
class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    price: float = Field(ge=0)


class OrderRecord(BaseModel):
    id: str
    user_id: str
    total_amount: float
    discount_applied: float = 0.0
    order_status: str = "confirmed"
    session_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        frozen = True
