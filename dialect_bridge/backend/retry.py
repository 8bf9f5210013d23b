# dialect_bridge/backend/retry.py
"""Retry policy for backend HTTP calls with exponential backoff."""

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


def is_retryable(exception: BaseException) -> bool:
    """
    Returns True if the exception should be retried.

    Retryable conditions:
    - httpx.TransportError (connect/read failures, timeouts)
    - httpx.HTTPStatusError (any non-2xx answer)

    Everything else, including asyncio.CancelledError, propagates immediately.
    """
    return isinstance(exception, (httpx.TransportError, httpx.HTTPStatusError))


def build_retrying(
    max_retries: int,
    backoff_base_ms: int,
    backoff_cap_ms: int,
) -> AsyncRetrying:
    """
    Build the tenacity controller for one logical request.

    Args:
        max_retries: Retries after the first attempt (0 = single attempt)
        backoff_base_ms: Wait before the first retry; doubles per retry
        backoff_cap_ms: Upper bound for any single wait

    Returns:
        AsyncRetrying that raises tenacity.RetryError once attempts run out
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(max_retries, 0) + 1),
        wait=wait_exponential(multiplier=backoff_base_ms / 1000, max=backoff_cap_ms / 1000),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=False,
    )
