"""Tests for sessions, conversation context and transcripts."""
import pytest

from stylist.database.schemas import RecommendedProduct
from stylist.memory.session_manager import SessionManager
from stylist.memory.transcript import ActionButton, Author, Transcript


@pytest.mark.asyncio
async def test_create_session(repository):
    manager = SessionManager(repository)

    session_id = await manager.create_session("user-priya")

    assert session_id.startswith("SES-")
    assert repository.sessions[session_id] == "user-priya"


@pytest.mark.asyncio
async def test_get_or_create_session_reuses_id(repository):
    manager = SessionManager(repository)

    assert await manager.get_or_create_session("SES-KNOWN", "user-rohan") == "SES-KNOWN"
    assert repository.sessions["SES-KNOWN"] == "user-rohan"


@pytest.mark.asyncio
async def test_build_context_for_unknown_shopper(repository):
    context = await SessionManager(repository).build_context("SES-X", "user-nobody")

    assert context.shopper is None
    assert context.shopper_name is None
    assert context.cart.lines == []


@pytest.mark.asyncio
async def test_build_context_loads_cart(repository):
    await repository.insert_cart_item("user-aarav", "SES-Y", "prod-bwk-oversized-tee")

    context = await SessionManager(repository).build_context("SES-Y", "user-aarav")

    assert context.shopper_name == "Aarav Mehta"
    assert [line.product_id for line in context.cart.lines] == ["prod-bwk-oversized-tee"]


def test_transcript_ids_and_shown_products(catalog):
    transcript = Transcript("web")
    product = RecommendedProduct.from_product(catalog[0])

    first = transcript.agent("Hi!", products=[product])
    second = transcript.shopper("Show me more")

    assert (first.id, second.id) == ("web-1", "web-2")
    assert first.author == Author.AGENT
    assert second.author == Author.SHOPPER
    assert transcript.shown_product_ids == {catalog[0].id}
    assert transcript.last is second
    assert len(transcript) == 2


def test_whatsapp_shopper_messages_are_read():
    transcript = Transcript("whatsapp")

    assert transcript.shopper("YES").read is True
    assert Transcript("web").shopper("YES").read is False


def test_message_to_dict():
    transcript = Transcript("whatsapp")
    message = transcript.agent(
        "Track it", actions=[ActionButton("Track Order", "track")], navigate_to="/orders"
    )

    data = message.to_dict()
    assert data["id"] == "whatsapp-1"
    assert data["author"] == "agent"
    assert data["actions"] == [{"label": "Track Order", "action": "track", "product_id": None}]
    assert data["navigate_to"] == "/orders"
    assert transcript.to_list() == [data]
