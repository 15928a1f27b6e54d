"""Conversation states shared by both chat channels."""
from enum import Enum


class ConversationState(str, Enum):
    IDLE = "idle"
    GREETING = "greeting"
    AWAITING_INPUT = "awaiting_input"
    INTENT_RESPONSE = "intent_response"
    ORDER_CONFIRMED = "order_confirmed"
    TRACKING = "tracking"
    OFFER_PRESENTATION = "offer_presentation"
    CART_UPDATE = "cart_update"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_COMPLETE = "payment_complete"
