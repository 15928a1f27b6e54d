"""Web chat API routes."""
from fastapi import APIRouter, HTTPException, Depends

from stylist.agent.registry import AgentRegistry
from stylist.agent.web_chat import WebChatAgent
from stylist.api.dependencies import get_registry, get_repository
from stylist.api.schemas import ChatMessage, ChatResponse, ChatStart
from stylist.analytics.error_tracker import error_tracker
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.utils.errors import StoreError

router = APIRouter(prefix="/api/chat", tags=["chat"])


def _response(agent: WebChatAgent, messages) -> ChatResponse:
    last = messages[-1] if messages else None
    return ChatResponse(
        session_id=agent.context.session_id,
        channel=agent.channel,
        state=agent.state.value,
        messages=[m.to_dict() for m in messages],
        quick_actions=agent.quick_actions() if agent.shopper else None,
        navigate_to=last.navigate_to if last else None,
    )


@router.post("/{session_id}/start", response_model=ChatResponse)
async def start_chat(
    session_id: str,
    body: ChatStart,
    repository: StoreRepository = Depends(get_repository),
    registry: AgentRegistry = Depends(get_registry),
):
    """Open a web chat and greet the shopper."""
    try:
        agent = await registry.web_agent(repository, session_id, body.user_id)
        if agent.shopper is None:
            registry.discard(agent.channel, session_id)
            raise HTTPException(status_code=404, detail="User not found")
        mark = len(agent.transcript)
        await agent.start()
        return _response(agent, list(agent.transcript.messages[mark:]))
    except HTTPException:
        raise
    except StoreError as e:
        logger.error(f"Store error starting chat: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        error_tracker.record_error(
            "server_error", f"Internal server error: {e}", {"session_id": session_id}
        )
        logger.error(f"Error starting chat: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error. Please try again later.")


@router.post("/{session_id}/messages", response_model=ChatResponse)
async def send_message(
    session_id: str,
    message: ChatMessage,
    repository: StoreRepository = Depends(get_repository),
    registry: AgentRegistry = Depends(get_registry),
):
    """Send a shopper message (or quick action label) to the web chat."""
    try:
        agent = registry.get(WebChatAgent.channel, session_id)
        if agent is None or (message.user_id and agent.shopper and agent.shopper.id != message.user_id):
            if not message.user_id:
                raise HTTPException(status_code=404, detail="Conversation not started")
            agent = await registry.web_agent(repository, session_id, message.user_id)
        if agent.shopper is None:
            raise HTTPException(status_code=404, detail="User not found")

        mark = len(agent.transcript)
        await agent.handle_message(message.message)
        return _response(agent, list(agent.transcript.messages[mark:]))
    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"Validation error in chat endpoint: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid request: {str(e)}")
    except StoreError as e:
        logger.error(f"Store error in chat endpoint: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        error_tracker.record_error(
            "server_error", f"Internal server error: {e}", {"session_id": session_id}
        )
        logger.error(f"Error in chat endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error. Please try again later.")
