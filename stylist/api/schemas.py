"""API request/response schemas."""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class SessionCreate(BaseModel):
    user_id: Optional[str] = None
    session_id: Optional[str] = None


class SessionResponse(BaseModel):
    session_id: str
    user_id: Optional[str] = None


class ChatStart(BaseModel):
    user_id: str


class ChatMessage(BaseModel):
    message: str = Field(min_length=1)
    user_id: Optional[str] = None


class ChatResponse(BaseModel):
    session_id: str
    channel: str
    state: str
    messages: List[Dict[str, Any]]
    quick_actions: Optional[List[str]] = None
    navigate_to: Optional[str] = None
    offers: Optional[List[Dict[str, Any]]] = None


class WhatsAppStart(BaseModel):
    user_id: Optional[str] = None
    navigation_state: Optional[Dict[str, Any]] = None  # orderData / orderId / product / fromKiosk


class WhatsAppAction(BaseModel):
    action: str  # track, add_to_cart, checkout, browse, pay
    product_id: Optional[str] = None
    payment_method: Optional[str] = None
    user_id: Optional[str] = None


class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int  # zero or less removes the line


class CheckoutRequest(BaseModel):
    user_id: str
    session_id: str
