"""
Retry with exponential backoff for async operations.

Shared by the signature listing and per-transaction fetch paths; they differ
only in attempt count and base delay.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from burn_tracker.burn_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[Any]]


def backoff_delay(base_delay_sec: float, attempt: int) -> float:
    """Delay after the given failed attempt (1-based): base * 2 ** attempt."""
    return base_delay_sec * (2 ** attempt)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    base_delay_sec: float,
    label: str,
    sleep: Sleeper = asyncio.sleep,
    **log_fields: Any,
) -> T:
    """
    Await operation() up to max_attempts times; return its first successful result.

    Every failed attempt is logged as "<label>_retry" before the next attempt or
    the final failure. Sleeps backoff_delay(base_delay_sec, attempt) between
    attempts, never after the last one. Re-raises the last exception when all
    attempts fail.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"{label}_retry",
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(e),
                error_type=type(e).__name__,
                **log_fields,
            )
            if attempt >= max_attempts:
                raise
            await sleep(backoff_delay(base_delay_sec, attempt))
    raise AssertionError("unreachable")
