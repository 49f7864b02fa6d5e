"""Retry utilities for resilient outbound calls."""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_exception(
    max_attempts: int = 3, delay: float = 1.0, backoff_factor: float = 2.0, exceptions: tuple = (Exception,)
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry decorator for synchronous functions.

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts in seconds
        backoff_factor: Multiplier for delay after each failure
        exceptions: Tuple of exceptions to retry on

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            last_exception = None
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {e}. "
                            f"Retrying in {current_delay}s..."
                        )
                        time.sleep(current_delay)
                        current_delay *= backoff_factor
                    else:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}")

            assert last_exception is not None, "last_exception should be set if all attempts failed"
            raise last_exception

        return wrapper

    return decorator


# Transport-level failures only: HTTP status errors are answers, not outages
http_retry = retry_on_exception(
    max_attempts=3,
    delay=0.5,
    backoff_factor=2.0,
    exceptions=(httpx.TransportError,),
)
