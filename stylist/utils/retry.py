"""Retry utilities with fixed backoff on an injectable clock."""
import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from stylist.analytics.logger import logger
from stylist.utils.config import settings
from stylist.utils.errors import CatalogUnavailableError, StoreError

T = TypeVar('T')


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        wait_seconds: float = 1.0,
        retry_on: Optional[List[Type[BaseException]]] = None
    ):
        self.max_attempts = max_attempts
        self.wait_seconds = wait_seconds
        self.retry_on = retry_on or [
            StoreError,
            ConnectionError,
            TimeoutError
        ]


def _log_before_sleep(name: str, config: RetryConfig) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Retrying {name} after {exc}"
            f" (attempt {retry_state.attempt_number}/{config.max_attempts})"
        )
    return before_sleep


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: Optional[RetryConfig] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    **kwargs: Any
) -> T:
    """
    Call an async function, retrying on the configured exception types.

    Args:
        func: Coroutine function to call
        config: Retry configuration
        sleep: Awaitable sleep used between attempts (defaults to asyncio.sleep)

    Raises:
        The last exception once all attempts are exhausted.
    """
    if config is None:
        config = RetryConfig()

    name = getattr(func, "__name__", repr(func))
    retryer = AsyncRetrying(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_fixed(config.wait_seconds),
        retry=retry_if_exception_type(tuple(config.retry_on)),
        reraise=True,
        sleep=sleep or asyncio.sleep,
        before_sleep=_log_before_sleep(name, config),
    )

    try:
        return await retryer(func, *args, **kwargs)
    except Exception as e:
        logger.error(f"All retries exhausted for {name}: {e}")
        raise


def catalog_retry_config() -> RetryConfig:
    """Initial catalog load plus the configured number of retries, spaced evenly."""
    return RetryConfig(
        max_attempts=settings.catalog_retry_attempts + 1,
        wait_seconds=settings.catalog_retry_wait_seconds,
        retry_on=[CatalogUnavailableError, StoreError]
    )
