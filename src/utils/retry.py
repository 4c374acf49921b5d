"""
Retry and pacing helpers for upstream calls.

``retry_with_backoff`` wraps a single awaitable factory with exponential
backoff. ``Pacer`` implementations space out sequential work such as batch
generation.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from .logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: ``initial_delay * multiplier ** (attempt - 1)``."""

    max_attempts: int = 3
    initial_delay: float = 2.0
    multiplier: float = 2.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    @classmethod
    def from_settings(cls, settings, retry_on: Optional[tuple[type[BaseException], ...]] = None) -> "RetryPolicy":
        return cls(
            max_attempts=max(1, settings.max_retries),
            initial_delay=settings.retry_delay,
            retry_on=retry_on or (Exception,),
        )

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        return self.initial_delay * (self.multiplier ** (attempt - 1))


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    description: str = "operation",
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Await ``func()`` until it succeeds or the policy is exhausted.

    Only exceptions listed in ``policy.retry_on`` are retried; anything else
    propagates immediately. The last retryable error is re-raised.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await func()
        except policy.retry_on as e:
            if attempt >= policy.max_attempts:
                logger.error(f"{description} failed after {attempt} attempts: {e}")
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{description} failed (attempt {attempt}/{policy.max_attempts}): {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            await sleep(delay)

    raise RuntimeError("retry_with_backoff called with max_attempts < 1")


class Pacer(Protocol):
    """Spaces out consecutive units of sequential work."""

    async def wait(self) -> None: ...


class FixedDelayPacer:
    """Waits a constant number of seconds between items."""

    def __init__(self, delay: float, sleep: Sleep = asyncio.sleep):
        self.delay = delay
        self._sleep = sleep

    async def wait(self) -> None:
        if self.delay > 0:
            logger.info(f"Pausing {self.delay:.0f}s before next item...")
            await self._sleep(self.delay)
