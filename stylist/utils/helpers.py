"""Utility helper functions."""

import random
import string
import time
from typing import Optional, Union

_BASE36 = string.digits + string.ascii_uppercase

Number = Union[int, float]


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_session_id(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """Time-seeded opaque session id, e.g. ``SES-LX3K9Q2A-7FQ1``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random
    suffix = "".join(rng.choice(_BASE36) for _ in range(4))
    return f"SES-{to_base36(now_ms)}-{suffix}"


def first_name(name: Optional[str], default: str = "there") -> str:
    """First whitespace-separated token of a display name."""
    if not name or not name.strip():
        return default
    return name.split()[0]


def discounted_price(price: Number, discount_percent: Optional[Number]) -> float:
    """Price after a percentage discount."""
    return price - (price * (discount_percent or 0) / 100)


def format_price(amount: Number) -> str:
    """Format an amount in rupees, dropping paise on whole values."""
    if float(amount).is_integer():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"
