"""Session and shopper profile routes."""
from fastapi import APIRouter, HTTPException, Depends
from typing import Optional

from stylist.api.dependencies import get_repository
from stylist.api.schemas import SessionCreate, SessionResponse
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.memory.session_manager import SessionManager
from stylist.utils.errors import StoreError

router = APIRouter(prefix="/api", tags=["sessions"])


@router.post("/sessions", response_model=SessionResponse)
async def create_session(
    body: Optional[SessionCreate] = None,
    repository: StoreRepository = Depends(get_repository),
):
    """Create (or reuse) a browser/device session."""
    body = body or SessionCreate()
    try:
        session_id = await SessionManager(repository).get_or_create_session(
            body.session_id, body.user_id
        )
        return SessionResponse(session_id=session_id, user_id=body.user_id)
    except StoreError as e:
        logger.error(f"Store error creating session: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/users")
async def list_users(repository: StoreRepository = Depends(get_repository)):
    """Shopper profiles to pick from."""
    try:
        users = await repository.list_users()
        return {"users": [u.model_dump() for u in users], "count": len(users)}
    except StoreError as e:
        logger.error(f"Store error listing users: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/users/{user_id}")
async def get_user(user_id: str, repository: StoreRepository = Depends(get_repository)):
    try:
        user = await repository.get_user(user_id)
    except StoreError as e:
        logger.error(f"Store error getting user: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": user.model_dump()}
