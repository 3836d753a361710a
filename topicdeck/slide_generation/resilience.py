"""Timeout and exponential-backoff wrappers for network-bound calls."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from functools import partial
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from .errors import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _deliver_late_result(callback: Callable[[Any], None], future: Future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    try:
        callback(future.result())
    except Exception:
        logger.exception("Late-result handler failed for abandoned operation")


def with_timeout(
    fn: Callable[[], T],
    seconds: float,
    *,
    on_late_result: Optional[Callable[[T], None]] = None,
) -> T:
    """Run ``fn`` and give up on it after ``seconds``.

    The call keeps running on its worker thread after the deadline; its result
    is discarded, or handed to ``on_late_result`` so the caller can undo any
    side effect it produced.
    """

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="topicdeck-timeout")
    future = executor.submit(fn)
    try:
        return future.result(timeout=seconds)
    except FutureTimeoutError:
        if future.done():
            # fn raised a TimeoutError of its own
            raise
        if on_late_result is not None:
            future.add_done_callback(partial(_deliver_late_result, on_late_result))
        raise OperationTimeoutError(seconds) from None
    finally:
        executor.shutdown(wait=False)


def retry_with_backoff(
    fn: Callable[[], T],
    *,
    retries: int = 3,
    initial_delay: float = 1.0,
    factor: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    label: str = "operation",
) -> T:
    """Call ``fn`` until it succeeds or the retry budget is spent.

    Waits ``initial_delay`` before the first retry and multiplies the delay by
    ``factor`` after each one. The last error propagates unchanged.
    """

    if retries < 0:
        raise ValueError("retries must be >= 0")

    attempts_remaining = retries
    delay = initial_delay
    while True:
        try:
            return fn()
        except retry_on as exc:
            if attempts_remaining <= 0:
                raise
            logger.info(
                "Retrying %s in %.1fs after %s. Attempts left: %d",
                label,
                delay,
                exc,
                attempts_remaining,
            )
            sleep(delay)
            delay *= factor
            attempts_remaining -= 1


__all__ = ["retry_with_backoff", "with_timeout"]
