"""Countdown timers for time-limited offers."""
import asyncio
from typing import Callable, Dict, List, Optional

from stylist.analytics.logger import logger
from stylist.utils.clock import Clock

ExpiryCallback = Callable[[], None]


class OfferTimer:
    """Per-offer countdown in whole seconds.

    Reaching zero fires ``on_expire`` exactly once; afterwards ticks,
    advances and restarts do nothing.
    """

    def __init__(self, remaining_seconds: int, on_expire: Optional[ExpiryCallback] = None):
        self.remaining_seconds = max(0, int(remaining_seconds))
        self.on_expire = on_expire
        self._fired = False
        if self.remaining_seconds == 0:
            self._expire()

    @classmethod
    def start(cls, initial_minutes: float, on_expire: Optional[ExpiryCallback] = None) -> "OfferTimer":
        return cls(int(max(0, initial_minutes) * 60), on_expire)

    @property
    def expired(self) -> bool:
        return self._fired

    def _expire(self) -> None:
        if self._fired:
            return
        self._fired = True
        self.remaining_seconds = 0
        if self.on_expire is not None:
            try:
                self.on_expire()
            except Exception as e:
                logger.error(f"Offer expiry callback failed: {e}", exc_info=True)

    def tick(self) -> None:
        """Advance the countdown by one second."""
        self.advance(1)

    def advance(self, seconds: int) -> None:
        if self._fired or seconds <= 0:
            return
        self.remaining_seconds = max(0, self.remaining_seconds - int(seconds))
        if self.remaining_seconds == 0:
            self._expire()

    def restart(self, initial_minutes: float) -> None:
        if self._fired:
            return
        self.remaining_seconds = int(max(0, initial_minutes) * 60)
        if self.remaining_seconds == 0:
            self._expire()

    async def run(self, clock: Clock) -> None:
        """Tick once per second on ``clock`` until expired."""
        while not self._fired:
            await clock.sleep(1)
            self.tick()

    def format_remaining(self) -> str:
        if self._fired:
            return "Expired"
        hours, rest = divmod(self.remaining_seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours:
            return f"{hours}h {minutes}m {seconds}s"
        return f"{minutes}m {seconds}s"


class OfferTimerBoard:
    """Live timers of one conversation, keyed by offer id."""

    def __init__(self, clock: Clock):
        self.clock = clock
        self.timers: Dict[str, OfferTimer] = {}
        self.expired_offers: List[str] = []
        self._task: Optional[asyncio.Task] = None

    def start_offer(
        self,
        offer_id: str,
        minutes: float,
        on_expire: Optional[ExpiryCallback] = None,
    ) -> OfferTimer:
        def expire():
            self.expired_offers.append(offer_id)
            logger.info(f"Offer {offer_id} expired")
            if on_expire is not None:
                on_expire()

        timer = OfferTimer.start(minutes, expire)
        self.timers[offer_id] = timer
        return timer

    def get(self, offer_id: str) -> Optional[OfferTimer]:
        return self.timers.get(offer_id)

    def is_expired(self, offer_id: str) -> bool:
        timer = self.timers.get(offer_id)
        return timer is not None and timer.expired

    def live(self) -> List[OfferTimer]:
        return [t for t in self.timers.values() if not t.expired]

    def tick(self) -> None:
        for timer in self.live():
            timer.tick()

    def advance(self, seconds: int) -> None:
        for timer in self.live():
            timer.advance(seconds)

    async def run(self) -> None:
        """Tick once per second while any timer is live."""
        while self.live():
            await self.clock.sleep(1)
            self.tick()

    def ensure_running(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())

    def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
