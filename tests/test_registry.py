"""Tests for per-channel conversation registry."""
from unittest.mock import patch

import pytest

from stylist.agent.registry import AgentRegistry
from stylist.agent.web_chat import WebChatAgent
from stylist.agent.whatsapp_chat import WhatsAppAgent


@pytest.mark.asyncio
async def test_same_session_returns_same_agent(repository, clock):
    registry = AgentRegistry(clock=clock)

    first = await registry.web_agent(repository, "SES-1", "user-priya")
    second = await registry.web_agent(repository, "SES-1")

    assert first is second
    assert registry.get("web", "SES-1") is first


@pytest.mark.asyncio
async def test_channels_do_not_share_conversations(repository, clock):
    registry = AgentRegistry(clock=clock)

    web = await registry.web_agent(repository, "SES-1", "user-priya")
    whatsapp = await registry.whatsapp_agent(repository, "SES-1", "user-priya")

    assert isinstance(web, WebChatAgent)
    assert isinstance(whatsapp, WhatsAppAgent)
    assert web.transcript is not whatsapp.transcript
    assert len(registry.agents) == 2


@pytest.mark.asyncio
async def test_shopper_change_starts_new_conversation(repository, clock):
    registry = AgentRegistry(clock=clock)

    priya = await registry.web_agent(repository, "SES-1", "user-priya")
    await priya.start()
    rohan = await registry.web_agent(repository, "SES-1", "user-rohan")

    assert rohan is not priya
    assert rohan.shopper.id == "user-rohan"
    assert len(rohan.transcript) == 0


@pytest.mark.asyncio
async def test_close_discards_all(repository, clock):
    registry = AgentRegistry(clock=clock)
    await registry.web_agent(repository, "SES-1", "user-priya")
    await registry.whatsapp_agent(repository, "SES-2", "user-rohan")

    registry.close()

    assert registry.agents == {}


@pytest.mark.asyncio
async def test_idle_conversations_are_evicted(repository, clock):
    registry = AgentRegistry(clock=clock, idle_seconds=600)
    whatsapp = await registry.whatsapp_agent(repository, "SES-IDLE", "user-rohan")
    await registry.web_agent(repository, "SES-BUSY", "user-priya")

    clock.advance(400)
    assert registry.get("web", "SES-BUSY") is not None
    clock.advance(300)

    with patch.object(whatsapp, "close") as close:
        assert registry.get("whatsapp", "SES-IDLE") is None
    close.assert_called_once()
    assert registry.get("web", "SES-BUSY") is not None
    assert list(registry.agents) == [("web", "SES-BUSY")]


@pytest.mark.asyncio
async def test_oldest_conversation_dropped_over_limit(repository, clock):
    registry = AgentRegistry(clock=clock, max_agents=2)
    await registry.web_agent(repository, "SES-1", "user-priya")
    await registry.web_agent(repository, "SES-2", "user-rohan")
    registry.get("web", "SES-1")

    await registry.web_agent(repository, "SES-3", "user-aarav")

    assert list(registry.agents) == [("web", "SES-1"), ("web", "SES-3")]


@pytest.mark.asyncio
async def test_agent_mid_turn_is_kept(repository, clock):
    registry = AgentRegistry(clock=clock, idle_seconds=10)
    agent = await registry.web_agent(repository, "SES-1", "user-priya")
    clock.advance(60)

    async with agent.turn_lock:
        assert registry.evict_idle() == 0
    assert registry.evict_idle() == 1
    assert registry.agents == {}
