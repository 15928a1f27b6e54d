"""Kiosk and mobile hand-off payloads for the WhatsApp continuation."""

import json
from typing import Any, Dict, Optional
from urllib.parse import unquote

from pydantic import BaseModel, ValidationError

from stylist.analytics.error_tracker import error_tracker
from stylist.analytics.logger import logger
from stylist.database.schemas import Product
from stylist.utils.errors import HandoffError


class HandoffProduct(BaseModel):
    """Whatever product fields the sender knew; any may be missing."""

    id: Optional[str] = None
    name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.brand and self.category)


class HandoffPayload(BaseModel):
    order_id: Optional[str] = None
    product_name: Optional[str] = None
    user_name: Optional[str] = None
    product: Optional[HandoffProduct] = None
    from_kiosk: bool = False


def _text(value: Any) -> Optional[str]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _product(value: Any) -> Optional[HandoffProduct]:
    if isinstance(value, Product):
        return HandoffProduct(**value.model_dump(include=set(HandoffProduct.model_fields)))
    if not isinstance(value, dict):
        return None
    try:
        return HandoffProduct.model_validate(
            {k: value.get(k) for k in HandoffProduct.model_fields if value.get(k) is not None}
        )
    except ValidationError as e:
        logger.warning(f"Dropping unreadable hand-off product: {e}")
        return None


def _from_fields(data: Dict[str, Any], from_kiosk: bool) -> HandoffPayload:
    return HandoffPayload(
        order_id=_text(data.get("orderId")),
        product_name=_text(data.get("productName")),
        user_name=_text(data.get("userName")),
        product=_product(data.get("product")),
        from_kiosk=from_kiosk,
    )


def decode_query_data(raw: str) -> Dict[str, Any]:
    """Decode the URL-encoded JSON ``data`` query parameter."""
    try:
        data = json.loads(unquote(raw))
    except (ValueError, TypeError) as e:
        raise HandoffError(f"hand-off data is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise HandoffError("hand-off data must be a JSON object")
    return data


def parse_handoff(
    query_data: Optional[str] = None,
    navigation_state: Optional[Dict[str, Any]] = None,
) -> HandoffPayload:
    """Build the hand-off from the query parameter or navigation state.

    The query parameter wins when present and decodable. Unreadable or
    missing fields come back as ``None``.
    """
    if query_data:
        try:
            return _from_fields(decode_query_data(query_data), from_kiosk=True)
        except HandoffError as e:
            error_tracker.record_error("malformed_handoff", str(e), {"source": "query"})

    if isinstance(navigation_state, dict) and navigation_state:
        order_data = navigation_state.get("orderData")
        if isinstance(order_data, dict):
            payload = _from_fields(order_data, from_kiosk=bool(navigation_state.get("fromKiosk")))
        else:
            product = _product(navigation_state.get("product"))
            payload = HandoffPayload(
                order_id=_text(navigation_state.get("orderId")),
                product_name=product.name if product else None,
                user_name=_text(navigation_state.get("userName")),
                product=product,
                from_kiosk=bool(navigation_state.get("fromKiosk")),
            )
        return payload.model_copy(update={"from_kiosk": payload.from_kiosk or bool(query_data)})

    return HandoffPayload(from_kiosk=bool(query_data))
