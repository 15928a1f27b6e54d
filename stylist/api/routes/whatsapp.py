"""WhatsApp continuation API routes."""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from stylist.agent.registry import AgentRegistry
from stylist.agent.whatsapp_chat import WhatsAppAgent
from stylist.api.dependencies import get_registry, get_repository
from stylist.api.schemas import ChatMessage, ChatResponse, WhatsAppAction, WhatsAppStart
from stylist.analytics.error_tracker import error_tracker
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.memory.handoff import parse_handoff
from stylist.memory.transcript import ConversationMessage
from stylist.utils.errors import StoreError

router = APIRouter(prefix="/api/whatsapp", tags=["whatsapp"])


def _response(agent: WhatsAppAgent, messages: List[ConversationMessage]) -> ChatResponse:
    return ChatResponse(
        session_id=agent.context.session_id,
        channel=agent.channel,
        state=agent.state.value,
        messages=[m.to_dict() for m in messages],
        offers=agent.offer_status(),
    )


def _server_error(session_id: str, e: Exception) -> HTTPException:
    error_tracker.record_error(
        "server_error", f"Internal server error: {e}", {"session_id": session_id}
    )
    logger.error(f"Error in WhatsApp endpoint: {e}", exc_info=True)
    return HTTPException(status_code=500, detail="Internal server error. Please try again later.")


def _existing(registry: AgentRegistry, session_id: str) -> WhatsAppAgent:
    agent = registry.get(WhatsAppAgent.channel, session_id)
    if agent is None:
        raise HTTPException(status_code=404, detail="Conversation not started")
    return agent


@router.post("/{session_id}/start", response_model=ChatResponse)
async def start_whatsapp(
    session_id: str,
    body: Optional[WhatsAppStart] = None,
    data: Optional[str] = Query(None, description="URL-encoded JSON hand-off from the kiosk"),
    repository: StoreRepository = Depends(get_repository),
    registry: AgentRegistry = Depends(get_registry),
):
    """Continue a kiosk or mobile order on WhatsApp."""
    body = body or WhatsAppStart()
    try:
        handoff = parse_handoff(data, body.navigation_state)
        agent = await registry.whatsapp_agent(repository, session_id, body.user_id)
        if agent.shopper is None and not handoff.from_kiosk:
            registry.discard(agent.channel, session_id)
            raise HTTPException(status_code=404, detail="User not found")
        messages = await agent.start(handoff)
        return _response(agent, messages)
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error starting WhatsApp chat: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        raise _server_error(session_id, e)


@router.post("/{session_id}/actions", response_model=ChatResponse)
async def whatsapp_action(
    session_id: str,
    body: WhatsAppAction,
    registry: AgentRegistry = Depends(get_registry),
):
    """Tap an action button (track, add_to_cart, checkout, browse, pay)."""
    try:
        agent = _existing(registry, session_id)
        messages = await agent.handle_action(body.action, body.product_id, body.payment_method)
        return _response(agent, messages)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _server_error(session_id, e)


@router.post("/{session_id}/messages", response_model=ChatResponse)
async def whatsapp_message(
    session_id: str,
    message: ChatMessage,
    registry: AgentRegistry = Depends(get_registry),
):
    """Send free text on the WhatsApp channel."""
    try:
        agent = _existing(registry, session_id)
        messages = await agent.handle_message(message.message)
        return _response(agent, messages)
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error(session_id, e)
