"""Session management and per-conversation context."""

from dataclasses import dataclass
from typing import Optional

from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.database.schemas import Shopper
from stylist.memory.cart import CartService
from stylist.utils.helpers import generate_session_id


@dataclass
class ConversationContext:
    """Session, shopper and cart threaded through a conversation."""

    session_id: str
    shopper: Optional[Shopper]
    cart: CartService

    @property
    def shopper_name(self) -> Optional[str]:
        return self.shopper.name if self.shopper else None


class SessionManager:
    """Manage shopper sessions."""

    def __init__(self, repository: StoreRepository):
        self.repository = repository

    async def create_session(self, user_id: Optional[str] = None) -> str:
        """Create a new session."""
        session_id = generate_session_id()
        await self.repository.touch_session(session_id, user_id)
        logger.info(f"Created new session: {session_id}")
        return session_id

    async def get_or_create_session(
        self, session_id: Optional[str] = None, user_id: Optional[str] = None
    ) -> str:
        """Reuse ``session_id`` if given, otherwise create one."""
        if not session_id:
            return await self.create_session(user_id)
        await self.repository.touch_session(session_id, user_id)
        return session_id

    async def build_context(self, session_id: str, user_id: Optional[str] = None) -> ConversationContext:
        """Load the shopper and cart for a session."""
        shopper = await self.repository.get_user(user_id) if user_id else None
        if user_id and shopper is None:
            logger.warning(f"Unknown shopper {user_id} for session {session_id}")
        await self.repository.touch_session(session_id, shopper.id if shopper else None)
        cart = CartService(self.repository, session_id, shopper)
        await cart.refresh()
        return ConversationContext(session_id=session_id, shopper=shopper, cart=cart)
