"""Shopper segment inference and segment-based catalog filtering.

The segment is guessed from the shopper's display name and used only to
pre-filter the catalog by image path convention (``/men/`` vs ``/women/``).
It is a best-effort, lossy filter: products whose image path carries neither
fragment drop out for every known segment. Scripted pairings bypass it.
"""
from enum import Enum
from typing import Iterable, List, Optional

from stylist.database.schemas import Product


class Segment(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


FEMALE_NAMES = ("priya", "priyanka", "sneha", "kavya", "ananya", "meera", "divya", "neha", "shreya")
MALE_NAMES = ("aarav", "rohan", "rahul", "arjun", "vikram", "aditya", "siddharth", "karan")

SEGMENT_PATH_FRAGMENTS = {
    Segment.MALE: "/men/",
    Segment.FEMALE: "/women/",
}


def infer_segment(name: Optional[str]) -> Segment:
    """Segment for a display name; female list is checked first."""
    lowered = (name or "").lower()
    if any(n in lowered for n in FEMALE_NAMES):
        return Segment.FEMALE
    if any(n in lowered for n in MALE_NAMES):
        return Segment.MALE
    return Segment.UNKNOWN


def filter_by_segment(products: Iterable[Product], segment: Segment) -> List[Product]:
    """Products whose image path matches the segment; all products when unknown."""
    products = list(products)
    fragment = SEGMENT_PATH_FRAGMENTS.get(segment)
    if fragment is None:
        return products
    return [p for p in products if fragment in (p.image_url or "")]
