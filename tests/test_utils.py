"""Tests for helpers, retry, clock and error tracking."""
import random

import pytest

from stylist.analytics.error_tracker import ErrorTracker
from stylist.utils.errors import CatalogUnavailableError, StoreError
from stylist.utils.helpers import (
    discounted_price,
    first_name,
    format_price,
    generate_session_id,
    to_base36,
)
from stylist.utils.retry import RetryConfig, catalog_retry_config, retry_async


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_generate_session_id():
    session_id = generate_session_id(now_ms=36, rng=random.Random(1))

    prefix, stamp, suffix = session_id.split("-")
    assert prefix == "SES"
    assert stamp == "10"
    assert len(suffix) == 4
    assert generate_session_id() != generate_session_id(now_ms=1)


def test_first_name():
    assert first_name("Priya Sharma") == "Priya"
    assert first_name(None) == "there"
    assert first_name("   ", default="Customer") == "Customer"


def test_prices():
    assert discounted_price(1000, 30) == 700
    assert discounted_price(1000, None) == 1000
    assert format_price(2079) == "₹2,079"
    assert format_price(1329.3) == "₹1,329.30"


@pytest.mark.asyncio
async def test_retry_async_waits_on_injected_sleep(clock):
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise StoreError("select products", "timeout")
        return "ok"

    result = await retry_async(
        flaky, config=RetryConfig(max_attempts=5, wait_seconds=0.5), sleep=clock.sleep
    )

    assert result == "ok"
    assert len(calls) == 3
    assert clock.sleeps == [0.5, 0.5]


@pytest.mark.asyncio
async def test_retry_async_reraises_after_last_attempt(clock):
    calls = []

    async def always_empty():
        calls.append(1)
        raise CatalogUnavailableError("catalog is empty")

    config = RetryConfig(max_attempts=3, wait_seconds=1, retry_on=[CatalogUnavailableError])
    with pytest.raises(CatalogUnavailableError):
        await retry_async(always_empty, config=config, sleep=clock.sleep)

    assert len(calls) == 3
    assert clock.sleeps == [1, 1]


@pytest.mark.asyncio
async def test_retry_async_does_not_retry_other_errors(clock):
    calls = []

    async def broken():
        calls.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        await retry_async(broken, sleep=clock.sleep)

    assert len(calls) == 1
    assert clock.sleeps == []


def test_catalog_retry_config():
    config = catalog_retry_config()

    assert config.max_attempts == 11
    assert config.wait_seconds == 1.0


@pytest.mark.asyncio
async def test_virtual_clock(clock):
    await clock.sleep(1.5)
    await clock.sleep(-3)
    clock.advance(2)

    assert clock.sleeps == [1.5, 0.0]
    assert clock.now() == 3.5
    assert clock.elapsed == 1.5


def test_error_tracker_counts_by_type():
    tracker = ErrorTracker()
    tracker.record_error("data_unavailable", "catalog empty", {"attempts": 11})
    tracker.record_error("mutation_failed", "insert failed")
    tracker.record_error("mutation_failed", "insert failed again")

    stats = tracker.get_error_stats()
    assert stats["total_errors"] == 3
    assert stats["error_types"] == {"data_unavailable": 1, "mutation_failed": 2}
    assert tracker.get_recent_errors(limit=1)[0]["message"] == "insert failed again"

    tracker.reset()
    assert tracker.get_error_stats()["total_errors"] == 0


def test_error_tracker_alerts_inside_window():
    now = [1000.0]
    tracker = ErrorTracker(thresholds={"mutation_failed": 2}, time_source=lambda: now[0])

    tracker.record_error("mutation_failed", "first")
    now[0] += 90
    tracker.record_error("mutation_failed", "second")
    assert tracker.alerts == []

    now[0] += 10
    tracker.record_error("mutation_failed", "third")
    assert len(tracker.alerts) == 1
    assert tracker.alerts[0]["count"] == 2
    assert tracker.totals["mutation_failed"] == 3
    assert tracker.get_error_stats(window_seconds=30)["total_errors"] == 2
