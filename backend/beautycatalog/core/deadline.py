"""
Deadline wrapper for store operations called from async code.

Services are synchronous and own a SQLAlchemy session; the store has no
built-in timeout. Async callers run them on a worker thread and bound
the wait with a caller-supplied deadline. The worker thread itself is
not interrupted: a create/update/delete that already started runs to
completion or fails on its own.
"""

from __future__ import annotations

import asyncio
from functools import partial
import logging
from typing import Any, Callable, Optional, TypeVar

from .config import settings
from .exceptions import TransientStoreException

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _deliver_late_result(callback: Callable[[Any], None], work: "asyncio.Future[Any]") -> None:
    if work.cancelled() or work.exception() is not None:
        return
    callback(work.result())


async def run_with_deadline(
    func: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = None,
    on_late_result: Optional[Callable[[T], None]] = None,
    **kwargs: Any,
) -> T:
    """
    Run a blocking store call on a worker thread with a deadline.

    Args:
        func: Synchronous callable (usually a bound service method)
        timeout: Seconds to wait; defaults to settings.store_timeout_seconds
        on_late_result: Called with the result if the call completes after
            the caller stopped waiting (deadline or cancellation). Use it to
            release whatever the call acquired.

    Raises:
        TransientStoreException: If the deadline elapses first
    """
    deadline = timeout if timeout is not None else settings.store_timeout_seconds
    work = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
    waited = asyncio.shield(work) if on_late_result is not None else work
    try:
        return await asyncio.wait_for(waited, timeout=deadline)
    except asyncio.TimeoutError as exc:
        if on_late_result is not None:
            work.add_done_callback(partial(_deliver_late_result, on_late_result))
        operation = getattr(func, "__name__", repr(func))
        logger.warning("Store operation %s exceeded %.2fs deadline", operation, deadline)
        raise TransientStoreException(
            f"The catalog store did not respond within {deadline:g} seconds",
            code="STORE_TIMEOUT",
            details={"operation": operation, "timeout_seconds": deadline},
        ) from exc
    except asyncio.CancelledError:
        if on_late_result is not None:
            work.add_done_callback(partial(_deliver_late_result, on_late_result))
        raise
