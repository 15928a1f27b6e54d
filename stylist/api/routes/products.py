"""Product API routes."""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from stylist.api.dependencies import get_repository
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.services.store_inventory import availability_summary
from stylist.utils.errors import StoreError

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def list_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    brand: Optional[str] = Query(None, description="Filter by brand"),
    limit: Optional[int] = Query(None, ge=1, le=200, description="Maximum results"),
    repository: StoreRepository = Depends(get_repository),
):
    """List the catalog in curated order."""
    try:
        products = await repository.list_products()
        if category:
            products = [p for p in products if (p.category or "").lower() == category.lower()]
        if brand:
            products = [p for p in products if brand.lower() in p.brand.lower()]
        total = len(products)
        if limit:
            products = products[:limit]
        return {"results": [p.model_dump() for p in products], "count": total}
    except StoreError as e:
        logger.error(f"Store error listing products: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{product_id}")
async def get_product(product_id: str, repository: StoreRepository = Depends(get_repository)):
    """Get product details by ID."""
    try:
        product = await repository.get_product(product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return {"product": product.model_dump()}
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error getting product: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{product_id}/stores")
async def get_store_availability(
    product_id: str,
    size: Optional[str] = Query(None, description="Size to check"),
    repository: StoreRepository = Depends(get_repository),
):
    """Nearby stores holding the product (mock stock)."""
    try:
        product = await repository.get_product(product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        if size and product.sizes and size not in product.sizes:
            raise HTTPException(status_code=400, detail=f"Size {size} not offered for this product")
        return availability_summary(product_id, size)
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error checking availability: {e}")
        raise HTTPException(status_code=502, detail=str(e))
