"""
Retry with exponential backoff for transient Google API failures.

Drive and Sheets calls fail now and then with rate limiting (HTTP 429),
server errors (5xx) or dropped connections. Those calls are safe to repeat,
so they are retried with a doubling delay (capped) and random jitter.

USAGE:
------
    from utils.retry import retry_on_transient_error

    @retry_on_transient_error(is_retryable=lambda e: isinstance(e, ConnectionError))
    def list_folder():
        return service.files().list(...).execute()
"""

import random
import time
from functools import wraps
from typing import Callable, Optional


# HTTP statuses worth another attempt
TRANSIENT_HTTP_STATUS_CODES = {429, 500, 502, 503, 504}

# Local filesystem errors are OSErrors too, but retrying them never helps
_PERMANENT_OS_ERRORS = (FileNotFoundError, PermissionError, IsADirectoryError,
                        NotADirectoryError)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (0-based), with 0.5x-1.5x jitter."""
    delay = min(base_delay * (2 ** attempt), max_delay)
    return delay * (0.5 + random.random())


def retry_on_transient_error(
    is_retryable: Callable[[Exception], bool],
    max_retries: int = 5,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    on_retry: Optional[Callable[[Exception, int, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """Decorator that retries a function on transient errors.

    Args:
        is_retryable: Returns True if an exception is transient
        max_retries: Retries after the first attempt (total = max_retries + 1)
        base_delay: Delay before the first retry, doubled each time
        max_delay: Upper bound for a single delay
        on_retry: Called as on_retry(exc, attempt, delay) before sleeping
        sleep: Sleep function (tests pass a no-op)

    Raises:
        The exception itself when not retryable, or the last one once
        retries run out.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if not is_retryable(exc) or attempt >= max_retries:
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay)
                    attempt += 1
                    if on_retry:
                        on_retry(exc, attempt, delay)
                    sleep(delay)
        return wrapper
    return decorator


def is_transient_network_error(exc: Exception) -> bool:
    """True for connection resets, timeouts and other socket-level errors."""
    if isinstance(exc, _PERMANENT_OS_ERRORS):
        return False
    return isinstance(exc, (ConnectionError, TimeoutError, OSError))
