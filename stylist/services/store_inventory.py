"""Static in-store stock for the kiosk "find in store" view."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class StoreStock(BaseModel):
    id: str
    name: str
    address: str
    distance_km: float
    stock: int

    class Config:
        frozen = True


MOCK_STORES = (
    StoreStock(id="store-1", name="Forum Mall", address="Koramangala, Bangalore", distance_km=3, stock=2),
    StoreStock(id="store-2", name="Indiranagar", address="100 Feet Road, Bangalore", distance_km=7, stock=5),
    StoreStock(id="store-3", name="DLF Promenade", address="Whitefield, Bangalore", distance_km=10, stock=0),
    StoreStock(id="store-4", name="Saket Mall", address="Bannerghatta Road, Bangalore", distance_km=15, stock=1),
    StoreStock(id="store-5", name="Select Citywalk", address="MG Road, Bangalore", distance_km=5, stock=3),
)


def stores_with_stock(product_id: str, size: Optional[str] = None) -> List[StoreStock]:
    """Stores holding the product, nearest first.

    Stock is mock data and identical for every product and size.
    """
    return sorted((s for s in MOCK_STORES if s.stock > 0), key=lambda s: s.distance_km)


def availability_summary(product_id: str, size: Optional[str] = None) -> Dict[str, Any]:
    stores = stores_with_stock(product_id, size)
    return {
        "product_id": product_id,
        "size": size,
        "total_stock": sum(s.stock for s in stores),
        "stores": [s.model_dump() for s in stores],
    }
