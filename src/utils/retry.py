"""
Retry with exponential backoff.

Used for control-plane calls whose loss would strand a job in the
running state (result submission).

Usage:
    from src.utils.retry import retry_with_backoff

    @retry_with_backoff(max_retries=2, retryable_exceptions=(requests.ConnectionError,))
    def submit(...):
        ...
"""

import logging
import random
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

logger = logging.getLogger(__name__)


def compute_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> float:
    """
    Delay before retry number attempt+1 (attempt counts from 0).

    Jitter spreads the delay by up to 25% either way, never below 0.1s.
    """
    delay = min(base_delay * (exponential_base ** attempt), max_delay)
    if jitter:
        spread = delay * 0.25
        delay = max(0.1, delay + random.uniform(-spread, spread))
    return delay


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: tuple[type[Exception], ...] | None = None,
    on_retry: Callable[[int, Exception, float], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator that retries a function with exponential backoff.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Initial delay in seconds
        max_delay: Upper bound for any single delay
        exponential_base: Growth factor between attempts
        jitter: Randomize delays by +/-25%
        retryable_exceptions: Exception types worth retrying; None retries all
        on_retry: Callback(attempt, exception, delay) before each sleep
        sleep: Sleep function, replaceable in tests

    Raises:
        The last exception once retries are exhausted, or immediately for
        a non-retryable exception
    """
    def decorator(func: Callable) -> Callable:
        func_name = getattr(func, "__name__", "function")

        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if retryable_exceptions and not isinstance(e, retryable_exceptions):
                        raise

                    if attempt == max_retries:
                        logger.error(
                            f"Max retries ({max_retries}) exceeded for {func_name}: "
                            f"{type(e).__name__}: {e}"
                        )
                        raise

                    delay = compute_delay(
                        attempt, base_delay, max_delay, exponential_base, jitter
                    )
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_retries + 1} failed for {func_name}: "
                        f"{type(e).__name__}: {e}. Retrying in {delay:.2f}s"
                    )

                    if on_retry:
                        on_retry(attempt + 1, e, delay)

                    sleep(delay)

        return wrapper
    return decorator
