"""Exponential backoff for async operations.

Used at startup while the database may still be coming up. Request paths
never retry: a transient store failure is surfaced as 503 and the client
decides.

Example:
    @retry(attempts=5, backoff=Backoff(initial=0.5))
    async def ping() -> None:
        ...
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING

from content_service.infra.metrics.tracking import track_retry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Backoff:
    """Delay before retry ``n`` (0-based): ``initial * multiplier**n``, capped at ``maximum``.

    With ``jitter`` the delay is scaled by a random factor in [0.5, 1.5).
    """

    initial: float = 1.0
    maximum: float = 30.0
    multiplier: float = 2.0
    jitter: bool = True

    def delay(self, retry_number: int) -> float:
        delay = min(self.initial * self.multiplier**retry_number, self.maximum)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay


class RetryExhaustedError(Exception):
    """Every attempt failed; ``last_error`` is the final failure."""

    def __init__(self, operation: str, attempts: int, last_error: Exception) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")


def retry[**P, R](
    attempts: int = 3,
    backoff: Backoff | None = None,
    retry_on: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry the decorated coroutine on ``retry_on`` exceptions.

    Other exceptions propagate immediately.

    Raises:
        RetryExhaustedError: When all ``attempts`` failed.
    """
    if attempts < 1:
        msg = "attempts must be at least 1"
        raise ValueError(msg)
    policy = backoff or Backoff()

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        operation = func.__qualname__

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            for attempt in range(1, attempts + 1):
                try:
                    result = await func(*args, **kwargs)
                except retry_on as exc:
                    if attempt == attempts:
                        track_retry(operation, "exhausted")
                        logger.error(
                            "Retries exhausted",
                            extra={"operation": operation, "attempts": attempt, "error": str(exc)},
                        )
                        raise RetryExhaustedError(operation, attempt, exc) from exc
                    delay = policy.delay(attempt - 1)
                    track_retry(operation, "retried")
                    logger.warning(
                        "Attempt %d/%d of %s failed; retrying in %.2fs",
                        attempt,
                        attempts,
                        operation,
                        delay,
                        extra={"operation": operation, "error": str(exc)},
                    )
                    await asyncio.sleep(delay)
                else:
                    if attempt > 1:
                        track_retry(operation, "recovered")
                    return result
            raise AssertionError("unreachable")

        return wrapper

    return decorator


__all__ = ["Backoff", "RetryExhaustedError", "retry"]
