"""
Retry configuration for completion API calls.

Centralized retry logic using tenacity for capped exponential backoff.
Retries are bounded: the assisted extraction call sits on the analysis path
and must fail closed quickly rather than retry indefinitely.

Key features:
- Exponential backoff with a low cap
- Retry on network errors and server errors (429, 5xx)
- Fail fast on client errors (400, 401, 403, 404)

Example:
    >>> from brand_visibility.completion.retry_config import create_retry_decorator
    >>> @create_retry_decorator()
    ... def call_api():
    ...     pass
"""

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

# ============================================================================
# RETRY CONSTANTS
# ============================================================================

# Total attempts including the first one
MAX_ATTEMPTS = 3

# Minimum wait time between retries (seconds)
MIN_WAIT_SECONDS = 1

# Cap on the exponential backoff (seconds)
MAX_WAIT_SECONDS = 8

# HTTP status codes that should trigger a retry
# 429: Rate limit exceeded (temporary)
# 500-504: Server errors (temporary)
RETRY_STATUS_CODES = frozenset([429, 500, 502, 503, 504])

# HTTP status codes that should NOT trigger a retry
# 400: Bad request, 401/403: credentials, 404: unknown endpoint or model
NO_RETRY_STATUS_CODES = frozenset([400, 401, 403, 404])

# Default HTTP request timeout in seconds, per attempt
REQUEST_TIMEOUT = 30.0

# ============================================================================
# RETRY DECORATOR FACTORY
# ============================================================================


def create_retry_decorator():
    """
    Create a tenacity retry decorator for completion API calls.

    Returns a configured retry decorator with:
    - Exponential backoff (1s min, 8s max)
    - Max 3 attempts total
    - Retry on: httpx.HTTPStatusError, httpx.ConnectError, httpx.TimeoutException
    - Reraise of the last exception once attempts are exhausted

    Returns:
        Retry decorator

    Note:
        The caller checks NO_RETRY_STATUS_CODES first and raises a
        non-httpx exception for them, so permanent errors are never retried.
    """
    return retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential(
            multiplier=1,
            min=MIN_WAIT_SECONDS,
            max=MAX_WAIT_SECONDS,
        ),
        retry=retry_if_exception_type(
            (
                httpx.HTTPStatusError,
                httpx.ConnectError,
                httpx.TimeoutException,
            )
        ),
        reraise=True,
    )
