"""Closed keyword intent classifier for the web chat."""
from enum import Enum
from typing import Callable, Dict, Any, List, Tuple

from stylist.analytics.logger import logger


class Intent(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    ETHNIC = "ethnic"
    MORE = "more"
    CART = "cart"
    HELP = "help"
    GENERAL = "general"


def _contains_any(*keywords: str) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        return any(word in text for word in keywords)
    return predicate


# First matching predicate wins
INTENT_RULES: List[Tuple[Callable[[str], bool], Intent]] = [
    (_contains_any("formal", "office", "work"), Intent.FORMAL),
    (_contains_any("casual", "weekend"), Intent.CASUAL),
    (_contains_any("ethnic", "traditional", "indian"), Intent.ETHNIC),
    (_contains_any("more", "other", "different"), Intent.MORE),
    (_contains_any("cart", "checkout"), Intent.CART),
    (_contains_any("help", "what can"), Intent.HELP),
]


class IntentClassifier:
    """Map shopper text to an intent."""

    def __init__(self, rules: List[Tuple[Callable[[str], bool], Intent]] = None):
        self.rules = list(rules or INTENT_RULES)

    def determine_intent(self, text: str) -> Dict[str, Any]:
        """Determine shopper intent from a message."""
        lowered = (text or "").lower()
        for predicate, intent in self.rules:
            if predicate(lowered):
                logger.debug(f"Classified {text!r} as {intent.value}")
                return {"type": intent, "confidence": 0.9}
        return {"type": Intent.GENERAL, "confidence": 0.5}

    def classify(self, text: str) -> Intent:
        return self.determine_intent(text)["type"]


# Global classifier
intent_classifier = IntentClassifier()
