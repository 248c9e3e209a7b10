"""
hub_provisioner.retry

Bounded retry with a fixed delay.

Responsibilities:
- Run an async operation up to `max_attempts` times, sleeping a fixed delay between attempts.
- Report an explicit outcome instead of raising, so callers apply their own policy.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from hub_provisioner.observability.logging import get_logger

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]

log = get_logger(__name__)


class RetryOutcome(enum.StrEnum):
    SUCCEEDED = "SUCCEEDED"
    SUCCEEDED_ON_RETRY = "SUCCEEDED_ON_RETRY"
    EXHAUSTED = "EXHAUSTED"


@dataclass(frozen=True, slots=True)
class RetryResult(Generic[T]):
    outcome: RetryOutcome
    attempts: int
    value: T | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not RetryOutcome.EXHAUSTED


async def bounded_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    delay: float,
    max_attempts: int = 2,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> RetryResult[T]:
    """
    No backoff, no jitter: the same `delay` is awaited before every retry.

    Any `Exception` from `operation` counts as a failed attempt; the last one is kept
    on the result.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    last_error: BaseException | None = None
    for attempt in range(1, max_attempts + 1):
        if attempt > 1:
            log.info("retry_wait", label=label, attempt=attempt, delay_seconds=delay)
            await sleep(delay)
        try:
            value = await operation()
        except Exception as e:
            last_error = e
            log.warning("attempt_failed", label=label, attempt=attempt, error=str(e))
            continue
        outcome = RetryOutcome.SUCCEEDED if attempt == 1 else RetryOutcome.SUCCEEDED_ON_RETRY
        return RetryResult(outcome=outcome, attempts=attempt, value=value)

    return RetryResult(
        outcome=RetryOutcome.EXHAUSTED, attempts=max_attempts, error=last_error
    )


# --- Module Notes -----------------------------------------------------------
# Role assignment is the only caller today; it uses max_attempts=2 (one retry).
