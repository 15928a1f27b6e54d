"""Web chat stylist: greeting, intent replies and quick actions."""

import asyncio
import random
from typing import Callable, Dict, List, Optional

from stylist.agent.catalog import CatalogLoader
from stylist.agent.intents import Intent, IntentClassifier, intent_classifier
from stylist.agent.states import ConversationState
from stylist.analytics.logger import conversation_logger
from stylist.database.repository import StoreRepository
from stylist.database.schemas import Product, RecommendedProduct, Shopper
from stylist.memory.session_manager import ConversationContext
from stylist.memory.transcript import ConversationMessage, Transcript
from stylist.services.recommendation_engine import (
    RecommendationEngine,
    favors_brand,
    recommendation_engine,
)
from stylist.services.segment import filter_by_segment, infer_segment
from stylist.utils.clock import Clock, system_clock
from stylist.utils.config import settings
from stylist.utils.errors import CatalogUnavailableError
from stylist.utils.helpers import first_name

GOLD_GREETINGS = (
    "Hi {first}! ✨ As a valued Gold member, we've curated some exclusive pieces just for you. "
    "Your premium style deserves the best!",
    "Welcome back, {first}! 🌟 Your Gold membership unlocks premium selections. "
    "Let me show you what's perfect for your elegant taste.",
    "{first}! 💎 As our Gold member, you get 30% off on all items. "
    "Here are some handpicked {brands} pieces that match your sophisticated style.",
)

STANDARD_GREETINGS = (
    "Hey {first}! 👋 Just dropped some fresh {brands} pieces, totally your {style} vibe. Want to see them?",
    "Hi {first}! 🎯 I've got some {brands} items that match your {style} perfectly. Ready to check them out?",
    "{first}! ✨ Your favorite {brands} just got some new arrivals. Perfect for your {style} aesthetic!",
)

HELP_TEXT = (
    "I'm here to help you find the perfect outfit, {first}! 💫 Try asking me:\n\n"
    "• \"Show me formal wear\" - for office-ready pieces\n"
    "• \"Casual outfits\" - for weekend vibes\n"
    "• \"Ethnic wear\" - for traditional looks\n"
    "• \"Show me more\" - for more recommendations\n\n"
    "What are you in the mood for today?"
)

FORMAL_CATEGORIES = ("Shirts", "Pants", "Blazers")
CASUAL_CATEGORIES = ("T-Shirts", "Hoodies", "Pants", "Tees")
FORMAL_BRANDS = ("allen solly", "van heusen", "louis philippe")
WEAR_INTENTS = (Intent.FORMAL, Intent.CASUAL, Intent.ETHNIC)

CART_PATH = "/cart"
CATALOG_NOTICE = "Unable to load product recommendations right now. I'll show you picks as soon as they're back."
PRODUCTS_PER_REPLY = 2


def _text_of(product: Product) -> str:
    return f"{product.brand or ''} {product.name or ''}".lower()


def _is_ethnic(product: Product) -> bool:
    name = (product.name or "").lower()
    category = (product.category or "").lower()
    return "ethnic" in category or any(w in name for w in ("kurta", "palazzo", "ethnic"))


def _is_w_floral_top(product: Product) -> bool:
    name = (product.name or "").lower()
    return (
        "w white" in name
        or "white floral" in name
        or ("white" in name and "floral" in name and "top" in name)
    )


def _is_traditional(product: Product) -> bool:
    name = (product.name or "").lower()
    return (
        _is_ethnic(product)
        or "saree" in name
        or "traditional" in name
        or (product.brand or "").lower() == "w"
        or name.startswith("w ")
    )


class WebChatAgent:
    """One web chat conversation for a shopper."""

    channel = "web"

    def __init__(
        self,
        context: ConversationContext,
        repository: StoreRepository,
        clock: Clock = system_clock,
        rng: Optional[random.Random] = None,
        classifier: IntentClassifier = intent_classifier,
        engine: RecommendationEngine = recommendation_engine,
    ):
        self.context = context
        self.repository = repository
        self.clock = clock
        self.rng = rng or random.Random()
        self.classifier = classifier
        self.engine = engine
        self.catalog_loader = CatalogLoader(repository, clock)
        self.transcript = Transcript(self.channel)
        self.log = conversation_logger(self.channel, context.session_id)
        self.state = ConversationState.IDLE
        self.products: List[Product] = []
        self.typing = False
        self.catalog_unavailable = False
        # One turn at a time per conversation
        self.turn_lock = asyncio.Lock()
        self.handlers: Dict[Intent, Callable[[], tuple]] = {
            Intent.FORMAL: self._formal,
            Intent.CASUAL: self._casual,
            Intent.ETHNIC: self._ethnic,
            Intent.MORE: self._more,
            Intent.CART: self._cart,
            Intent.HELP: self._help,
            Intent.GENERAL: self._general,
        }

    @property
    def shopper(self) -> Optional[Shopper]:
        return self.context.shopper

    @property
    def first_name(self) -> str:
        return first_name(self.shopper.name if self.shopper else None)

    def _set_state(self, state: ConversationState) -> None:
        if state != self.state:
            self.log.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    async def _load_products(self) -> None:
        if self.products:
            return
        if self.catalog_unavailable:
            # Retry budget already spent; one attempt per turn until the catalog is back
            self.products = await self.catalog_loader.load_once()
            self.catalog_unavailable = not self.products
            return
        try:
            self.products = await self.catalog_loader.load()
        except CatalogUnavailableError as e:
            self.log.warning(f"Continuing without catalog: {e}")
            self.catalog_unavailable = True
            self.transcript.agent(CATALOG_NOTICE)

    async def _pause(self, seconds: float) -> None:
        self.typing = True
        try:
            await self.clock.sleep(seconds)
        finally:
            self.typing = False

    # Product selection

    def segment_products(self) -> List[Product]:
        segment = infer_segment(self.shopper.name if self.shopper else None)
        return filter_by_segment(self.products, segment)

    def _unseen(self, products, limit: int = PRODUCTS_PER_REPLY) -> List[Product]:
        shown = self.transcript.shown_product_ids
        return [p for p in products if p.id not in shown][:limit]

    def baseline_products(self) -> List[Product]:
        """Favorite-brand picks if there are two, else the top unseen segment products."""
        if not self.shopper or not self.products:
            return []
        filtered = self.segment_products()
        favorites = [p for p in filtered if favors_brand(self.shopper, p.brand)]
        favorites = self._unseen(favorites, limit=len(favorites))
        if len(favorites) >= PRODUCTS_PER_REPLY:
            return favorites[:PRODUCTS_PER_REPLY]
        return self._unseen(filtered)

    def _attach(self, products: List[Product]) -> List[RecommendedProduct]:
        reasons = self.engine.browse_reasons(products, self.shopper)
        return [RecommendedProduct.from_product(p, reason=r) for p, r in zip(products, reasons)]

    # Greeting

    def greeting_text(self) -> str:
        shopper = self.shopper
        brands = " and ".join(shopper.favorite_brands) or "fashion"
        style = shopper.style_preference or "style"
        pool = GOLD_GREETINGS if shopper.loyalty_tier == "Gold" else STANDARD_GREETINGS
        template = self.rng.choice(pool)
        return template.format(first=self.first_name, brands=brands, style=style)

    async def start(self) -> Optional[ConversationMessage]:
        """Greet a known shopper once, on an empty transcript."""
        async with self.turn_lock:
            return await self._greet()

    async def _greet(self) -> Optional[ConversationMessage]:
        if self.shopper is None:
            self.log.warning("Started without a shopper")
            return None
        if len(self.transcript) > 0:
            return None

        self._set_state(ConversationState.GREETING)
        await self._load_products()
        await self._pause(settings.reply_delay_seconds)
        message = self.transcript.agent(
            self.greeting_text(), products=self._attach(self.baseline_products())
        )
        self._set_state(ConversationState.AWAITING_INPUT)
        return message

    # Turns

    def quick_actions(self) -> List[str]:
        actions = ["Show formal wear", "Casual outfits"]
        if "priya" in (self.shopper.name.lower() if self.shopper else ""):
            actions.append("Traditional wear")
        return actions + ["View cart", "More options"]

    async def tap_quick_action(self, label: str) -> ConversationMessage:
        return await self.handle_message(label)

    async def handle_message(self, text: str) -> ConversationMessage:
        """Reply to one shopper message."""
        if self.shopper is None:
            raise ValueError("web chat requires a shopper")
        async with self.turn_lock:
            return await self._reply(text)

    async def _reply(self, text: str) -> ConversationMessage:
        if self.state == ConversationState.IDLE:
            await self._greet()

        self.transcript.shopper(text)
        self._set_state(ConversationState.INTENT_RESPONSE)
        await self._load_products()
        await self._pause(settings.reply_delay_seconds)

        intent = self.classifier.classify(text)
        reply, products, navigate_to = self.handlers[intent]()
        if not products and intent in WEAR_INTENTS:
            products = self._unseen(self.segment_products())

        self.log.info(f"intent={intent.value} products={len(products)}")
        message = self.transcript.agent(
            reply, products=self._attach(products), navigate_to=navigate_to
        )
        self._set_state(ConversationState.AWAITING_INPUT)
        return message

    # Intent handlers return (text, products, navigate_to)

    def _formal(self):
        filtered = self.segment_products()
        if "rohan" in self.shopper.name.lower():
            products = self._unseen([p for p in filtered if "allen solly" in _text_of(p)])
            if not products:
                products = self._unseen(
                    [
                        p for p in filtered
                        if p.category in FORMAL_CATEGORIES
                        or any(b in (p.brand or "").lower() for b in FORMAL_BRANDS)
                    ]
                )
        else:
            products = self._unseen([p for p in filtered if p.category in FORMAL_CATEGORIES])
        brands = " and ".join(p.brand for p in products)
        text = (
            f"Perfect! 👔 Here are some great formal options from {brands}, "
            "ideal for your office wardrobe. Which one catches your eye?"
        )
        return text, products, None

    def _casual(self):
        filtered = self.segment_products()
        if "aarav" in self.shopper.name.lower():
            products = self._aarav_casual(filtered)
        else:
            products = self._unseen([p for p in filtered if p.category in CASUAL_CATEGORIES])
        style = self.shopper.style_preference or "style"
        text = (
            "Nice choice! 🌟 These casual pieces are perfect for a relaxed weekend. "
            f"I think they match your {style} vibe perfectly!"
        )
        return text, products, None

    def _aarav_casual(self, filtered: List[Product]) -> List[Product]:
        shown = self.transcript.shown_product_ids
        all_bewakoof = [
            p for p in self.products if "bewakoof" in _text_of(p) and p.id not in shown
        ]
        segment = infer_segment(self.shopper.name)
        bewakoof = filter_by_segment(all_bewakoof, segment)

        if len(bewakoof) >= PRODUCTS_PER_REPLY:
            return bewakoof[:PRODUCTS_PER_REPLY]
        if len(bewakoof) == 1:
            fill = self._unseen(
                [
                    p for p in filtered
                    if p.id != bewakoof[0].id
                    and ("souled" in _text_of(p) or "flying machine" in _text_of(p))
                ],
                limit=1,
            )
            return bewakoof + fill
        if len(all_bewakoof) >= PRODUCTS_PER_REPLY:
            self.log.warning("No Bewakoof products in segment, using unfiltered Bewakoof products")
            return all_bewakoof[:PRODUCTS_PER_REPLY]
        return self._unseen(
            [
                p for p in filtered
                if any(b in _text_of(p) for b in ("bewakoof", "souled", "flying machine"))
                or p.category in CASUAL_CATEGORIES
            ]
        )

    def _ethnic(self):
        filtered = self.segment_products()
        if "priya" in self.shopper.name.lower():
            shown = self.transcript.shown_product_ids
            w_top = next((p for p in filtered if _is_w_floral_top(p) and p.id not in shown), None)
            others = [p for p in filtered if _is_traditional(p) and (w_top is None or p.id != w_top.id)]
            if w_top is not None:
                products = [w_top] + self._unseen(others, limit=1)
            else:
                products = self._unseen(others) or self._unseen(
                    [p for p in filtered if _is_ethnic(p) or "traditional" in (p.name or "").lower()]
                )
        else:
            products = self._unseen([p for p in filtered if _is_ethnic(p)])
        text = (
            "Beautiful! 🪷 Here's some stunning ethnic wear that'll make you stand out. "
            "These pieces are trending right now!"
        )
        return text, products, None

    def _more(self):
        text = (
            f"Sure thing, {self.first_name}! ✨ Here are more options I think you'll love. "
            "Want me to filter by price or brand?"
        )
        return text, self.baseline_products(), None

    def _cart(self):
        text = (
            "Great! 🛒 Taking you to your cart. "
            "You can review everything and checkout when you're ready!"
        )
        return text, [], CART_PATH

    def _help(self):
        return HELP_TEXT.format(first=self.first_name), [], None

    def _general(self):
        products = self.baseline_products()
        if not products:
            text = (
                f"I'd be happy to help, {self.first_name}! What type of clothing are you looking "
                "for today? You can ask for formal wear, casual outfits, or ethnic wear!"
            )
            return text, [], None
        if any(favors_brand(self.shopper, p.brand) for p in products):
            brands = " and ".join(self.shopper.favorite_brands)
            style = self.shopper.style_preference or "style"
            text = (
                f"Based on your love for {brands}, I think you'll love these! 💫 "
                f"They match your {style} perfectly."
            )
        else:
            text = f"Here are some picks I think you'll love, {self.first_name}! 💫 Want to see more options?"
        return text, products, None
