"""WhatsApp continuation: order confirmation, tracking, upsell offers and payment."""

import asyncio
from typing import Dict, List, Optional

from stylist.agent.catalog import CatalogLoader
from stylist.agent.states import ConversationState
from stylist.analytics.error_tracker import error_tracker
from stylist.analytics.logger import conversation_logger
from stylist.database.repository import StoreRepository
from stylist.database.schemas import OrderItemCreate, OrderRecord, Product, RecommendedProduct, Shopper
from stylist.memory.handoff import HandoffPayload, HandoffProduct
from stylist.memory.session_manager import ConversationContext
from stylist.memory.transcript import ActionButton, ConversationMessage, Transcript
from stylist.services.offer_timer import OfferTimerBoard
from stylist.services.recommendation_engine import (
    RecommendationEngine,
    is_scripted_shopper,
    recommendation_engine,
    tier_offer_config,
)
from stylist.services.segment import filter_by_segment, infer_segment
from stylist.utils.clock import Clock, system_clock
from stylist.utils.config import settings
from stylist.utils.errors import CatalogUnavailableError, StoreError
from stylist.utils.helpers import discounted_price, first_name, format_price

TRACK = "track"
ADD_TO_CART = "add_to_cart"
CHECKOUT = "checkout"
BROWSE = "browse"
PAY = "pay"

GENERIC_REPLY = "Thanks for your message! How can I help you today?"
SELECT_PRODUCT_NOTICE = "Please select a product first."
SELECT_PROFILE_NOTICE = "Please select a user profile first."
CATALOG_NOTICE = "Unable to load product recommendations. Please refresh the page."
NO_SOURCE_NOTICE = "Unable to find a product to recommend. Please try again."
CART_FAILED_NOTICE = "Sorry, we couldn't add that to your cart right now. Please try again."
PAYMENT_FAILED = "Sorry, there was an error processing your payment. Please try again."

# Scripted shoppers whose kiosk hand-off goes straight to offers
DIRECT_UPSELL_SHOPPERS = ("rohan",)

OFFER_CLOSERS = {
    "rohan": "⏰ Limited time offer - expires in 2 hours!\n\nComplete your look with this perfect pair!",
    "aarav": "⏰ Limited time offer - expires in 2 hours!\n\nWant to complete your streetwear look?",
}
DEFAULT_CLOSER = "⏰ Limited time offer - expires soon!"


def _source_keyword_match(name: str, product: Product) -> bool:
    """Per-shopper fallback source product when nothing else is known."""
    brand = (product.brand or "").lower()
    title = (product.name or "").lower()
    if "rohan" in name:
        return ("allen solly" in brand or "allen solly" in title) and (
            "blue" in title or "shirt" in title
        )
    if "aarav" in name:
        return ("bewakoof" in brand or "bewakoof" in title) and any(
            w in title for w in ("oversized", "graphic", "tee")
        )
    if "priya" in name:
        return (
            "w white floral" in title
            or "white floral printed round neck" in title
            or ("white" in title and "floral" in title and "top" in title)
        )
    return False


class WhatsAppAgent:
    """One WhatsApp conversation continuing a kiosk or mobile order."""

    channel = "whatsapp"

    def __init__(
        self,
        context: ConversationContext,
        repository: StoreRepository,
        clock: Clock = system_clock,
        engine: RecommendationEngine = recommendation_engine,
        autorun_timers: Optional[bool] = None,
    ):
        self.context = context
        self.repository = repository
        self.clock = clock
        self.engine = engine
        self.catalog_loader = CatalogLoader(repository, clock)
        self.transcript = Transcript(self.channel)
        self.log = conversation_logger(self.channel, context.session_id)
        self.timers = OfferTimerBoard(clock)
        self.autorun_timers = settings.offer_timers_autorun if autorun_timers is None else autorun_timers
        self.state = ConversationState.IDLE
        self.handoff = HandoffPayload()
        self.order_id: Optional[str] = None
        self.catalog: List[Product] = []
        self.source_product: Optional[Product] = None
        self.offered: Dict[str, RecommendedProduct] = {}
        self.selected_product: Optional[RecommendedProduct] = None
        self.payment_method = settings.default_payment_method
        self.last_order: Optional[OrderRecord] = None
        self.typing = False
        # One turn at a time per conversation
        self.turn_lock = asyncio.Lock()

    # Helpers

    @property
    def shopper(self) -> Optional[Shopper]:
        return self.context.shopper

    @property
    def shopper_name(self) -> str:
        if self.shopper:
            return self.shopper.name
        return self.handoff.user_name or "Customer"

    def _is_named(self, *fragments: str) -> bool:
        names = [(self.handoff.user_name or "").lower(), (self.shopper.name if self.shopper else "").lower()]
        return any(f in n for f in fragments for n in names if n)

    def _set_state(self, state: ConversationState) -> None:
        if state != self.state:
            self.log.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    async def _pause(self, seconds: float) -> None:
        self.typing = True
        try:
            await self.clock.sleep(seconds)
        finally:
            self.typing = False

    def _since(self, index: int) -> List[ConversationMessage]:
        return list(self.transcript.messages[index:])

    def _notice(self, text: str) -> ConversationMessage:
        return self.transcript.agent(text)

    def _adopt_shopper(self, shopper: Shopper) -> None:
        self.context.shopper = shopper
        self.context.cart.shopper = shopper

    # Entry

    async def start(self, handoff: HandoffPayload) -> List[ConversationMessage]:
        """Confirm the handed-off order and continue the flow."""
        async with self.turn_lock:
            return await self._start(handoff)

    async def _start(self, handoff: HandoffPayload) -> List[ConversationMessage]:
        if len(self.transcript) > 0:
            return []
        mark = len(self.transcript)
        self.handoff = handoff

        if self.shopper is None and handoff.user_name:
            try:
                shopper = await self.repository.find_user_by_name(handoff.user_name)
            except StoreError as e:
                self.log.error(f"Could not resolve hand-off shopper {handoff.user_name!r}: {e}")
                shopper = None
            if shopper:
                self._adopt_shopper(shopper)

        if handoff.from_kiosk and handoff.product and not handoff.product.is_complete:
            await self._enrich_handoff_product()

        self.order_id = handoff.order_id
        if not self.order_id:
            self.log.warning("Started without an order id")
            await self._pause(settings.confirmation_delay_seconds)
            self.transcript.agent(f"Hi {first_name(self.shopper_name)}! 👋 How can I help you today?")
            self._set_state(ConversationState.AWAITING_INPUT)
            return self._since(mark)

        await self._pause(settings.confirmation_delay_seconds)
        self._set_state(ConversationState.ORDER_CONFIRMED)
        self.log.info(f"Order {self.order_id} confirmed")

        if handoff.from_kiosk:
            text = (
                f"Thank you for shopping at {settings.brand_name}! 🎉\n\n"
                f"Your order {self.order_id} has been confirmed.\n\n"
                "We hope you love your purchase! 💙"
            )
            if self._is_named(*DIRECT_UPSELL_SHOPPERS):
                self.transcript.agent(text)
                await self.clock.sleep(settings.offer_followup_delay_seconds)
                await self.present_offers()
                return self._since(mark)
            self.transcript.agent(text, actions=[ActionButton("Track Order", TRACK)])
        else:
            product_name = handoff.product_name or (handoff.product.name if handoff.product else None)
            if not product_name:
                line = next(iter(self.context.cart.lines), None)
                product_name = line.product.name if line and line.product else "Product"
            user_name = handoff.user_name or (self.shopper.name if self.shopper else "there")
            text = (
                f"Hey {user_name}! Your {product_name} is on the way 🚚\n\n"
                f"Order ID: {self.order_id}\n"
                f"Delivery: {settings.delivery_eta}\n\n"
                "Track your order: [Track Now]"
            )
            self.transcript.agent(text, actions=[ActionButton("Track Order", TRACK)])

        self._set_state(ConversationState.AWAITING_INPUT)
        return self._since(mark)

    async def _enrich_handoff_product(self) -> None:
        partial = self.handoff.product
        try:
            if partial.id:
                found = await self.repository.get_product(partial.id)
            elif partial.name:
                found = await self.repository.find_product_by_name(partial.name)
            else:
                found = None
        except StoreError as e:
            self.log.warning(f"Could not enrich hand-off product: {e}")
            return
        if found:
            self.handoff = self.handoff.model_copy(
                update={"product": HandoffProduct(**found.model_dump(include=set(HandoffProduct.model_fields)))}
            )

    # Actions

    async def handle_action(
        self,
        action: str,
        product_id: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> List[ConversationMessage]:
        """Handle a tapped action button."""
        async with self.turn_lock:
            return await self._handle_action(action, product_id, payment_method)

    async def _handle_action(
        self, action: str, product_id: Optional[str], payment_method: Optional[str]
    ) -> List[ConversationMessage]:
        mark = len(self.transcript)
        if action == TRACK:
            await self.track_order()
        elif action == ADD_TO_CART:
            await self.add_to_cart(product_id)
        elif action == CHECKOUT:
            await self.checkout(product_id, payment_method)
        elif action == BROWSE:
            await self.present_offers()
        elif action == PAY:
            if payment_method:
                self.select_payment_method(payment_method)
            await self.pay()
        else:
            self.log.warning(f"Unknown WhatsApp action {action!r}")
        return self._since(mark)

    async def handle_message(self, text: str) -> List[ConversationMessage]:
        """Free text: buying words add the offered product, anything else gets an acknowledgement."""
        async with self.turn_lock:
            return await self._handle_message(text)

    async def _handle_message(self, text: str) -> List[ConversationMessage]:
        mark = len(self.transcript)
        self.transcript.shopper(text)
        await self._pause(settings.reply_delay_seconds)
        lowered = text.lower()
        if any(w in lowered for w in ("yes", "add", "buy")) and self.selected_product:
            await self.add_to_cart(self.selected_product.id, echo=False)
        else:
            self.transcript.agent(GENERIC_REPLY)
        return self._since(mark)

    async def track_order(self) -> None:
        self.transcript.shopper("Track Order")
        self._set_state(ConversationState.TRACKING)
        await self._pause(settings.typing_delay_seconds)
        self.transcript.agent(
            f"📦 Order Status: {self.order_id or 'pending'}\n\n"
            "✅ Confirmed\n🔄 Processing\n📦 Packed\n🚚 Out for Delivery\n\n"
            f"Expected delivery: {settings.delivery_eta}\n\n"
            "Your order is being prepared!"
        )
        await self.clock.sleep(settings.offer_followup_delay_seconds)
        await self.present_offers()

    # Offers

    async def _resolve_source(self) -> Optional[Product]:
        partial = self.handoff.product
        if partial is not None:
            match = next(
                (
                    p for p in self.catalog
                    if (partial.id and p.id == partial.id)
                    or (partial.name and p.name == partial.name)
                ),
                None,
            )
            if match is None and partial.name and not partial.is_complete:
                first_word = partial.name.split(" ")[0]
                match = next((p for p in self.catalog if first_word in p.name), None)
            if match is not None:
                return match
            if partial.is_complete and partial.name:
                return Product(
                    id=partial.id or "handoff-product",
                    brand=partial.brand,
                    name=partial.name,
                    price=partial.price or 0,
                    category=partial.category,
                    image_url=partial.image_url,
                )

        try:
            await self.context.cart.refresh()
        except StoreError as e:
            self.log.warning(f"Cart unavailable while resolving offer source: {e}")
        line = next(iter(self.context.cart.lines), None)
        if line and line.product:
            return line.product

        name = self.shopper_name.lower()
        scripted = next((p for p in self.catalog if _source_keyword_match(name, p)), None)
        if scripted is not None:
            self.log.info(f"Using scripted source product {scripted.name} for {self.shopper_name}")
            return scripted

        if self.catalog:
            self.log.warning(f"Using fallback source product {self.catalog[0].name}")
            return self.catalog[0]
        return None

    def _recommendation_shopper(self) -> Shopper:
        if self.shopper:
            return self.shopper
        return Shopper(id="guest", name=self.shopper_name)

    async def present_offers(self) -> None:
        """Load the catalog, pick a source product and present upsell offers."""
        self._set_state(ConversationState.OFFER_PRESENTATION)
        try:
            self.catalog = await self.catalog_loader.load()
        except CatalogUnavailableError:
            self._notice(CATALOG_NOTICE)
            self._set_state(ConversationState.AWAITING_INPUT)
            return

        source = await self._resolve_source()
        if source is None:
            self._notice(NO_SOURCE_NOTICE)
            self._set_state(ConversationState.AWAITING_INPUT)
            return
        self.source_product = source

        shopper = self._recommendation_shopper()
        if is_scripted_shopper(shopper.name):
            pool = self.catalog
        else:
            pool = filter_by_segment(self.catalog, infer_segment(shopper.name))
        recommendations = self.engine.recommend(
            source, pool, shopper, tier_offer_config(shopper.loyalty_tier)
        )

        if not recommendations:
            await self._pause(settings.typing_delay_seconds)
            self.transcript.agent(
                f"Your {source.brand} pick is a great choice! I'll let you know when we find "
                "something that pairs well with it."
            )
            self._set_state(ConversationState.AWAITING_INPUT)
            return

        for index, product in enumerate(recommendations):
            if index > 0:
                await self.clock.sleep(settings.second_offer_delay_seconds)
            await self._pause(settings.typing_delay_seconds)
            self._offer_message(product, source, shopper, first=index == 0)

        self._set_state(ConversationState.AWAITING_INPUT)

    def _offer_message(
        self, product: RecommendedProduct, source: Product, shopper: Shopper, first: bool
    ) -> ConversationMessage:
        reason = self.engine.recommendation_reason(product, shopper, source)
        final = discounted_price(product.price, product.discount_percent)
        pct = f"{product.discount_percent or 0:g}"
        if first:
            opener = f"BTW, these {product.brand} items go INSANE with your new {source.brand} style! 👟"
            closer = next(
                (text for key, text in OFFER_CLOSERS.items() if key in shopper.name.lower()),
                DEFAULT_CLOSER,
            )
        else:
            opener = f"And this {product.brand} piece complements your style perfectly! 💫"
            closer = DEFAULT_CLOSER
        text = (
            f"{opener}\n\n{product.name}\n{reason}\n\n"
            f"💰 Special Price: {format_price(final)} ({pct}% OFF)\n{closer}"
        )
        message = self.transcript.agent(
            text,
            products=[product],
            actions=[
                ActionButton("Add to Cart", ADD_TO_CART, product.id),
                ActionButton("Checkout Now", CHECKOUT, product.id),
            ],
        )
        self.offered[product.id] = product
        self.selected_product = product
        if product.is_time_limited:
            self.timers.start_offer(message.id, product.expires_in)
            if self.autorun_timers:
                self.timers.ensure_running()
        return message

    def offer_status(self) -> List[Dict[str, object]]:
        """Countdown state of every offer presented so far."""
        status = []
        for message in self.transcript:
            timer = self.timers.get(message.id)
            if timer is None:
                continue
            status.append(
                {
                    "message_id": message.id,
                    "product_id": message.products[0].id if message.products else None,
                    "remaining_seconds": timer.remaining_seconds,
                    "remaining": timer.format_remaining(),
                    "expired": timer.expired,
                }
            )
        return status

    # Cart and payment

    def _product_for(self, product_id: Optional[str]) -> Optional[RecommendedProduct]:
        if product_id and product_id in self.offered:
            return self.offered[product_id]
        if product_id:
            match = next((p for p in self.catalog if p.id == product_id), None)
            if match:
                return RecommendedProduct.from_product(match)
            return None
        return self.selected_product

    async def add_to_cart(self, product_id: Optional[str] = None, echo: bool = True) -> None:
        product = self._product_for(product_id)
        if product is None:
            self._notice(SELECT_PRODUCT_NOTICE)
            return
        if echo:
            self.transcript.shopper("YES")
        self._set_state(ConversationState.CART_UPDATE)

        result = await self.context.cart.add(product.id)
        if not result.get("success"):
            self._notice(result.get("message") if "error" not in result else CART_FAILED_NOTICE)
            self._set_state(ConversationState.AWAITING_INPUT)
            return

        self.selected_product = product
        await self._pause(settings.typing_delay_seconds)
        final = discounted_price(product.price, product.discount_percent)
        self.transcript.agent(
            "Awesome! Added to cart 🛒\n\n"
            f"{product.name}\n"
            f"Price: {format_price(product.price)}\n"
            f"Discount: {product.discount_percent or 0:g}% OFF\n"
            f"Final: {format_price(final)}\n\n"
            "Want to checkout now?",
            actions=[
                ActionButton("Checkout", CHECKOUT, product.id),
                ActionButton("Browse More", BROWSE),
            ],
        )
        self._set_state(ConversationState.AWAITING_INPUT)

    def select_payment_method(self, method: str) -> str:
        methods = settings.payment_method_list()
        if method not in methods:
            raise ValueError(f"Unsupported payment method {method!r}; choose one of {', '.join(methods)}")
        self.payment_method = method
        return method

    async def checkout(self, product_id: Optional[str] = None, payment_method: Optional[str] = None) -> None:
        product = self._product_for(product_id) if product_id else self.selected_product
        if product is None:
            self._notice(SELECT_PRODUCT_NOTICE)
            return
        if payment_method:
            self.select_payment_method(payment_method)
        self.selected_product = product
        self._set_state(ConversationState.PAYMENT_PENDING)
        final = discounted_price(product.price, product.discount_percent)
        methods = " / ".join(settings.payment_method_list())
        self.transcript.agent(
            "Complete Payment 💳\n\n"
            f"{product.name}\n"
            f"Amount: {format_price(final)}\n"
            f"Payment method: {self.payment_method} ({methods})",
            actions=[ActionButton(f"Pay {format_price(final)}", PAY, product.id)],
        )

    async def pay(self) -> None:
        product = self.selected_product
        if product is None:
            self._notice(SELECT_PRODUCT_NOTICE)
            return
        if self.shopper is None:
            self._notice(SELECT_PROFILE_NOTICE)
            return

        self._set_state(ConversationState.PAYMENT_PENDING)
        await self._pause(settings.payment_delay_seconds)
        final = round(discounted_price(product.price, product.discount_percent), 2)
        try:
            order = await self.repository.insert_order(
                user_id=self.shopper.id,
                session_id=self.context.session_id,
                total_amount=final,
                discount_applied=round(product.price - final, 2),
                items=[OrderItemCreate(product_id=product.id, quantity=1, price=product.price)],
            )
        except StoreError as e:
            error_tracker.record_error(
                "mutation_failed",
                str(e),
                {"operation": "insert order", "session_id": self.context.session_id},
            )
            self.transcript.agent(PAYMENT_FAILED)
            return

        self.last_order = order
        self.order_id = order.id
        self._set_state(ConversationState.PAYMENT_COMPLETE)
        self.log.info(f"Order {order.id} paid via {self.payment_method}")
        self.transcript.agent(
            "✅ Payment successful!\n\n"
            f"Order ID: {order.id}\n"
            f"Amount: {format_price(final)}\n"
            "Same delivery (tomorrow 6 PM)\n\n"
            "Track: [Track Order]\n\n"
            f"Thanks for shopping with {settings.brand_name}! 🙌",
            actions=[ActionButton("Track Order", TRACK)],
        )

    def close(self) -> None:
        self.timers.close()
