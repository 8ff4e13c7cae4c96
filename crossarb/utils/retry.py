"""Retry with exponential backoff for provider requests.

Only transient failures are retried: transport errors, timeouts and 5xx/429
responses. Anything else propagates on the first attempt.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

import httpx

from crossarb.utils.logging import get_logger


logger = get_logger("retry")


T = TypeVar("T")

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, (httpx.TransportError, asyncio.TimeoutError))


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 0.5,
    backoff_factor: float = 2.0,
    max_delay: float = 10.0,
    exceptions: Tuple[Type[BaseException], ...] = (httpx.HTTPError, asyncio.TimeoutError),
    jitter: bool = True,
) -> T:
    """Await ``func()`` until it succeeds or ``max_retries`` attempts are used.

    Args:
        func: Zero-argument coroutine factory
        max_retries: Maximum number of attempts
        initial_delay: Delay in seconds before the second attempt
        backoff_factor: Multiplier for delay between retries
        max_delay: Maximum delay between retries in seconds
        exceptions: Exception types eligible for retry
        jitter: Whether to add random jitter to delays

    Returns:
        The result of the first successful call

    Raises:
        The last exception raised by func if all retries fail, or the first
        non-transient one
    """
    delay = initial_delay
    for attempt in range(1, max_retries + 1):
        try:
            return await func()
        except exceptions as e:
            if attempt >= max_retries or not is_transient(e):
                logger.warning("Giving up after %d attempt(s): %s", attempt, e)
                raise

            # Jitter spreads out retries from concurrent callers
            actual_delay = delay * (0.5 + random.random() * 0.5) if jitter else delay
            actual_delay = min(actual_delay, max_delay)
            logger.debug("Retry attempt %d/%d after %.2fs: %s", attempt, max_retries, actual_delay, e)
            await asyncio.sleep(actual_delay)
            delay *= backoff_factor

    raise RuntimeError("retries exhausted without a result")
