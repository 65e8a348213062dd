"""Fixed-delay retry for a single fallible coroutine function."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from ..errors import ScoringFailure

T = TypeVar("T")

_logger = structlog.get_logger(__name__)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    delay: float,
    retry_on: tuple[type[BaseException], ...],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    name: str = "operation",
) -> T:
    """Run ``operation`` up to ``attempts`` times, sleeping ``delay`` between tries.

    Exceptions outside ``retry_on`` propagate on the spot, and so does
    cancellation: ``asyncio.CancelledError`` is never in ``retry_on``.
    When every attempt fails, ``ScoringFailure`` is raised from the last error.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: BaseException | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as exc:
            last_error = exc
            _logger.warning(
                "llm.attempt_failed",
                operation=name,
                attempt=attempt,
                attempts=attempts,
                error=str(exc) or type(exc).__name__,
            )
        if attempt < attempts:
            await sleep(delay)

    reason = str(last_error) or type(last_error).__name__
    _logger.error("llm.retries_exhausted", operation=name, attempts=attempts, error=reason)
    raise ScoringFailure(
        f"can't {name} after {attempts} attempts: {reason}",
        attempts=attempts,
    ) from last_error


__all__ = ["retry_async"]
