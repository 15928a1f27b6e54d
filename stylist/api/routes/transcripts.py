"""Transcript read-back for both chat channels."""
from fastapi import APIRouter, HTTPException, Depends

from stylist.agent.registry import AgentRegistry
from stylist.agent.web_chat import WebChatAgent
from stylist.agent.whatsapp_chat import WhatsAppAgent
from stylist.api.dependencies import get_registry

router = APIRouter(prefix="/api", tags=["transcripts"])

CHANNELS = {
    "chat": WebChatAgent.channel,
    "web": WebChatAgent.channel,
    "whatsapp": WhatsAppAgent.channel,
}


@router.get("/{channel}/{session_id}/transcript")
async def get_transcript(
    channel: str,
    session_id: str,
    registry: AgentRegistry = Depends(get_registry),
):
    """Full transcript of one channel's conversation."""
    if channel not in CHANNELS:
        raise HTTPException(status_code=404, detail=f"Unknown channel: {channel}")
    agent = registry.get(CHANNELS[channel], session_id)
    if agent is None:
        raise HTTPException(status_code=404, detail="Conversation not found")

    result = {
        "session_id": session_id,
        "channel": agent.channel,
        "state": agent.state.value,
        "is_typing": agent.typing,
        "messages": agent.transcript.to_list(),
    }
    if isinstance(agent, WhatsAppAgent):
        result["offers"] = agent.offer_status()
    return result
