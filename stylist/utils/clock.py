"""Clock abstraction for simulated delays and countdown ticks.

Conversations never call ``asyncio.sleep`` directly; they await
``clock.sleep`` so tests can swap in a ``VirtualClock`` and advance time
deterministically.
"""
import asyncio
import time
from typing import List


class Clock:
    """Source of time and suspension points for a conversation."""

    def now(self) -> float:
        raise NotImplementedError

    async def sleep(self, seconds: float) -> None:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall-clock time backed by asyncio."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


class VirtualClock(Clock):
    """Clock that advances instantly; every sleep is recorded."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        self.sleeps.append(seconds)
        self._now += seconds
        # Yield so other tasks observe the suspension point
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self._now += max(0.0, seconds)

    @property
    def elapsed(self) -> float:
        return sum(self.sleeps)


system_clock = SystemClock()
