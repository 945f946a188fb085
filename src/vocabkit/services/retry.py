"""Opt-in retry policy for awaitable calls.

Nothing in vocabkit retries on its own. Callers that want retries wrap a
coroutine function, typically ``GenerationClient.send``::

    send = retry_async(attempts=3, delay=2.0)(client.send)
"""
import asyncio
import functools
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type

from vocabkit.exceptions import HTTPError, NetworkError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def is_transient(error: BaseException) -> bool:
    """Network failures and throttling/server-side HTTP statuses are worth retrying."""
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, HTTPError):
        return error.status in RETRYABLE_STATUSES
    return False


def retry_async(
    attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    retry_on: Optional[Callable[[BaseException], bool]] = None,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
):
    """Build a decorator retrying a coroutine function on transient errors.

    Args:
        attempts: Total number of calls, including the first one.
        delay: Wait before the first retry, in seconds.
        backoff: Multiplier applied to the wait after each retry.
        retry_on: Predicate deciding whether an error is retried.
            Defaults to :func:`is_transient`.
        exceptions: Exception types considered at all; others propagate.
        sleep: Awaitable used for waiting.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    should_retry = retry_on or is_transient

    def decorator(func):
        name = getattr(func, "__name__", repr(func))

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            wait = delay
            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= attempts or not should_retry(e):
                        raise
                    logger.warning(
                        f"{name} failed (attempt {attempt}/{attempts}): {e}. "
                        f"Retrying in {wait:.1f}s"
                    )
                    await sleep(wait)
                    wait *= backoff

        return wrapper

    return decorator
