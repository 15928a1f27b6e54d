"""Shopping cart API routes."""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Any, Dict, Optional

from stylist.api.dependencies import get_repository
from stylist.api.schemas import CartItemCreate, CartItemUpdate, CheckoutRequest
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.memory.cart import CartService
from stylist.utils.errors import StoreError

router = APIRouter(prefix="/api", tags=["cart"])


async def _cart(
    repository: StoreRepository, user_id: Optional[str], session_id: Optional[str]
) -> CartService:
    if not user_id:
        raise HTTPException(status_code=401, detail="Select a shopper profile first")
    if not session_id:
        raise HTTPException(status_code=400, detail="session_id is required")
    shopper = await repository.get_user(user_id)
    if shopper is None:
        raise HTTPException(status_code=404, detail="User not found")
    return CartService(repository, session_id, shopper)


def _raise_for(result: Dict[str, Any], not_found_status: int = 400) -> Dict[str, Any]:
    if result.get("success"):
        return result
    if "error" in result:
        raise HTTPException(status_code=502, detail=result["message"])
    raise HTTPException(status_code=not_found_status, detail=result.get("message", "Request failed"))


@router.get("/cart")
async def get_cart(
    user_id: Optional[str] = Query(None, description="Shopper ID"),
    session_id: Optional[str] = Query(None, description="Session ID"),
    repository: StoreRepository = Depends(get_repository),
):
    """Get the cart with loyalty pricing applied."""
    try:
        cart = await _cart(repository, user_id, session_id)
        return await cart.summary()
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error getting cart: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/cart")
async def add_item(
    item: CartItemCreate,
    user_id: Optional[str] = Query(None, description="Shopper ID"),
    session_id: Optional[str] = Query(None, description="Session ID"),
    repository: StoreRepository = Depends(get_repository),
):
    """Add item to cart."""
    try:
        cart = await _cart(repository, user_id, session_id)
        product = await repository.get_product(item.product_id)
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")
        result = _raise_for(await cart.add(item.product_id, item.quantity))
        result["cart"] = await cart.summary()
        return result
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error adding to cart: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding to cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/cart/items/{item_id}")
async def update_item(
    item_id: str,
    update: CartItemUpdate,
    user_id: Optional[str] = Query(None, description="Shopper ID"),
    session_id: Optional[str] = Query(None, description="Session ID"),
    repository: StoreRepository = Depends(get_repository),
):
    """Change a line's quantity; zero or less removes it."""
    try:
        cart = await _cart(repository, user_id, session_id)
        result = _raise_for(await cart.update_quantity(item_id, update.quantity), not_found_status=404)
        result["cart"] = await cart.summary()
        return result
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error updating cart: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/cart/items/{item_id}")
async def remove_item(
    item_id: str,
    user_id: Optional[str] = Query(None, description="Shopper ID"),
    session_id: Optional[str] = Query(None, description="Session ID"),
    repository: StoreRepository = Depends(get_repository),
):
    """Remove item from cart."""
    try:
        cart = await _cart(repository, user_id, session_id)
        result = _raise_for(await cart.remove(item_id), not_found_status=404)
        result["cart"] = await cart.summary()
        return result
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error removing from cart: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error removing from cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/cart")
async def clear_cart(
    user_id: Optional[str] = Query(None, description="Shopper ID"),
    session_id: Optional[str] = Query(None, description="Session ID"),
    repository: StoreRepository = Depends(get_repository),
):
    """Empty the cart."""
    try:
        cart = await _cart(repository, user_id, session_id)
        return _raise_for(await cart.clear())
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error clearing cart: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/checkout")
async def checkout(
    body: CheckoutRequest,
    repository: StoreRepository = Depends(get_repository),
):
    """Place an order for the cart; the result carries the WhatsApp hand-off data."""
    try:
        cart = await _cart(repository, body.user_id, body.session_id)
        return _raise_for(await cart.checkout())
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error during checkout: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error during checkout: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
