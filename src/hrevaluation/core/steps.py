"""Step boundaries for the orchestrators."""

from __future__ import annotations

import asyncio
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from ..errors import EvaluationError

T = TypeVar("T")


@contextmanager
def pipeline_step(name: str, failure: type[EvaluationError], logger: Any) -> Iterator[None]:
    """Tag errors raised inside the block with the step ``name``.

    Errors that are already an ``EvaluationError`` keep their kind; anything
    else is wrapped as ``failure``. Cancellation passes through untouched.
    """
    try:
        yield
    except EvaluationError as exc:
        if exc.step is None:
            exc.step = name
        logger.warning("pipeline.step_failed", step=name, error_kind=exc.kind, error=exc.message)
        raise
    except Exception as exc:
        logger.warning("pipeline.step_failed", step=name, error_kind=failure.kind, error=str(exc))
        raise failure(str(exc) or type(exc).__name__, step=name) from exc


async def run_transaction(write: Callable[..., T], *args: Any) -> T:
    """Run a transactional store ``write`` in a worker thread.

    The worker thread outlives a cancelled awaiter, so cancellation sets the
    ``abort`` event handed to ``write`` and the transaction rolls back
    instead of committing.
    """
    abort = threading.Event()
    try:
        return await asyncio.to_thread(write, *args, abort=abort)
    except asyncio.CancelledError:
        abort.set()
        raise
