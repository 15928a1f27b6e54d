"""Append-only conversation transcripts."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from stylist.database.schemas import RecommendedProduct


class Author(str, Enum):
    AGENT = "agent"
    SHOPPER = "shopper"


@dataclass(frozen=True)
class ActionButton:
    label: str
    action: str
    product_id: Optional[str] = None


@dataclass(frozen=True)
class ConversationMessage:
    id: str
    author: Author
    text: str
    products: Tuple[RecommendedProduct, ...] = ()
    actions: Tuple[ActionButton, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    read: bool = False
    navigate_to: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author.value,
            "text": self.text,
            "products": [p.model_dump() for p in self.products],
            "actions": [
                {"label": a.label, "action": a.action, "product_id": a.product_id}
                for a in self.actions
            ],
            "created_at": self.created_at.isoformat(),
            "read": self.read,
            "navigate_to": self.navigate_to,
        }


class Transcript:
    """Ordered messages of one channel; messages are never edited or removed."""

    def __init__(self, channel: str):
        self.channel = channel
        self._messages: List[ConversationMessage] = []
        self.shown_product_ids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    @property
    def messages(self) -> Tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Optional[ConversationMessage]:
        return self._messages[-1] if self._messages else None

    def append(
        self,
        author: Author,
        text: str,
        products: Optional[List[RecommendedProduct]] = None,
        actions: Optional[List[ActionButton]] = None,
        read: bool = False,
        navigate_to: Optional[str] = None,
    ) -> ConversationMessage:
        message = ConversationMessage(
            id=f"{self.channel}-{len(self._messages) + 1}",
            author=author,
            text=text,
            products=tuple(products or ()),
            actions=tuple(actions or ()),
            read=read,
            navigate_to=navigate_to,
        )
        self._messages.append(message)
        self.shown_product_ids.update(p.id for p in message.products)
        return message

    def agent(self, text: str, **kwargs) -> ConversationMessage:
        return self.append(Author.AGENT, text, **kwargs)

    def shopper(self, text: str) -> ConversationMessage:
        # Shopper messages on the WhatsApp channel show as delivered and read
        return self.append(Author.SHOPPER, text, read=self.channel == "whatsapp")

    def to_list(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self._messages]
