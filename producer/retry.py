"""
Retry with exponential backoff for backend calls.

Every generation operation wraps its backend call in retry_with_backoff().
Only failures the client boundary tagged as transient (or as an unusable
response payload) are retried; anything else propagates after one try.
"""
import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import structlog

from studio.errors import BackendError, ErrorKind

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_INITIAL_DELAY = 1.0  # seconds, doubled after each failed attempt

RETRYABLE_KINDS = frozenset({ErrorKind.TRANSIENT, ErrorKind.BAD_RESPONSE})


def is_retryable(error: BaseException) -> bool:
    """True if the failure is worth another try."""
    if isinstance(error, BackendError):
        return error.kind in RETRYABLE_KINDS
    # Raw transport errors that escaped the client wrapper
    return isinstance(error, httpx.TransportError)


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_INITIAL_DELAY,
    operation: Optional[str] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Run fn, retrying retryable failures with exponential backoff.

    Makes at most retries + 1 attempts. With the defaults the waits between
    attempts are 1s, 2s, 4s. The last failure is re-raised unchanged.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt
        retries: Number of retries after the first attempt
        delay: Wait before the first retry, in seconds
        operation: Name used in log events
        sleep: Awaitable sleep function (defaults to asyncio.sleep)
    """
    sleep = sleep or asyncio.sleep
    attempt = 0

    while True:
        attempt += 1
        try:
            return await fn()
        except Exception as e:
            attempts_left = retries - (attempt - 1)
            if attempts_left <= 0 or not is_retryable(e):
                raise

            logger.warning(
                "backend_call_retrying",
                operation=operation,
                attempt=attempt,
                attempts_left=attempts_left,
                delay=delay,
                error=str(e),
                error_type=type(e).__name__,
            )
            await sleep(delay)
            delay *= 2
