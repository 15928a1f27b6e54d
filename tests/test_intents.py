"""Tests for the keyword intent classifier."""
import pytest

from stylist.agent.intents import Intent, IntentClassifier, intent_classifier


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Show me formal wear", Intent.FORMAL),
        ("Something for the office", Intent.FORMAL),
        ("Casual outfits", Intent.CASUAL),
        ("plans for the weekend", Intent.CASUAL),
        ("Traditional wear", Intent.ETHNIC),
        ("Indian festive looks", Intent.ETHNIC),
        ("More options", Intent.MORE),
        ("something different", Intent.MORE),
        ("View cart", Intent.CART),
        ("ready to checkout", Intent.CART),
        ("help", Intent.HELP),
        ("What can you do?", Intent.HELP),
        ("hello", Intent.GENERAL),
    ],
)
def test_classify(text, expected):
    assert intent_classifier.classify(text) == expected


def test_first_rule_wins():
    assert intent_classifier.classify("casual clothes for work") == Intent.FORMAL


def test_determine_intent_confidence():
    assert intent_classifier.determine_intent("FORMAL") == {"type": Intent.FORMAL, "confidence": 0.9}
    assert intent_classifier.determine_intent("") == {"type": Intent.GENERAL, "confidence": 0.5}


def test_custom_rules():
    classifier = IntentClassifier(rules=[(lambda text: "bag" in text, Intent.MORE)])

    assert classifier.classify("Any bags?") == Intent.MORE
    assert classifier.classify("formal") == Intent.GENERAL
