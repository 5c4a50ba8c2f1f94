"""Bounded retry for transient adapter failures."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tasksync.contracts.exceptions import TRANSIENT_ERRORS, RateLimited

T = TypeVar("T")

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
_BASE_DELAY = 0.5
_MAX_DELAY = 4.0

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int, exc: BaseException | None = None) -> float:
    """Delay before retry number *attempt* (0-based); a longer ``retry_after`` wins."""
    seconds = min(_MAX_DELAY, _BASE_DELAY * (2**attempt)) + random.uniform(0.0, 0.25)
    if isinstance(exc, RateLimited) and exc.retry_after is not None:
        seconds = max(seconds, exc.retry_after)
    return seconds


async def call_with_retries(
    op: Callable[[], Awaitable[T]],
    *,
    attempts: int = MAX_ATTEMPTS,
    sleep: Sleep = asyncio.sleep,
    label: str = "remote call",
    retry_on: tuple[type[BaseException], ...] = TRANSIENT_ERRORS,
) -> T:
    """Await ``op()``, retrying only the errors in *retry_on* (default ``RateLimited`` and ``Timeout``).

    *op* is a zero-argument factory because a coroutine can only be awaited
    once. The last transient error is re-raised when all attempts fail; any
    other exception propagates immediately.
    """
    for attempt in range(attempts):
        try:
            return await op()
        except retry_on as exc:
            if attempt + 1 >= attempts:
                raise
            delay = backoff_delay(attempt, exc)
            logger.warning("Retrying %s after %s (attempt %d, %.2fs)", label, type(exc).__name__, attempt + 1, delay)
            await sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover
