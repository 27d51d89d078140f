"""
Retry with backoff for backend writes.

Every store mutation goes through retry_operation(). Authentication failures
are final: retrying them only delays the error the user has to act on.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from app.domain.errors import AuthError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_AUTH_MARKERS = ("JWT", "auth", "unauthorized")


def is_auth_error(error: BaseException) -> bool:
    """AuthError, or any error whose message mentions JWT/auth/unauthorized"""
    if isinstance(error, AuthError):
        return True
    message = str(error)
    return any(marker in message for marker in _AUTH_MARKERS)


def compute_delay(attempt: int, delay: float, backoff: str, max_delay: float) -> float:
    """Delay before retry number `attempt` (1-based)"""
    if backoff == "exponential":
        wait = delay * (2 ** (attempt - 1))
    elif backoff == "linear":
        wait = delay * attempt
    else:
        raise ValueError(f"Unknown backoff strategy: {backoff}")
    return min(wait, max_delay)


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: str = "exponential",
    max_delay: float = 30.0,
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """
    Run an async operation, retrying on failure.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_retries: Retries after the first attempt
        delay: Base delay in seconds
        backoff: 'exponential' (delay * 2^(n-1)) or 'linear' (delay * n)
        max_delay: Upper bound for a single wait
        on_retry: Called with (attempt, error) before each wait

    Returns:
        The operation's result.

    Raises:
        The last error once retries are exhausted, or an auth error immediately.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            attempt += 1
            if is_auth_error(e):
                logger.warning(f"Not retrying authentication failure: {e}")
                raise
            if attempt > max_retries:
                logger.error(f"Operation failed after {max_retries} retries: {e}")
                raise

            wait = compute_delay(attempt, delay, backoff, max_delay)
            logger.info(f"Retry {attempt}/{max_retries} in {wait:.1f}s after error: {e}")
            if on_retry:
                on_retry(attempt, e)
            await asyncio.sleep(wait)
