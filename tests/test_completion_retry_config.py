"""
Tests for completion/retry_config.py module.

Test coverage:
- Constants validation (bounded attempts and backoff)
- Retry behavior on transient errors (5xx, network, timeout)
- Fail-fast behavior on exceptions outside the retry set
- Max attempts enforcement and re-raise of the last error
"""

import time
from unittest.mock import Mock

import httpx
import pytest

from brand_visibility.completion.retry_config import (
    MAX_ATTEMPTS,
    MAX_WAIT_SECONDS,
    MIN_WAIT_SECONDS,
    NO_RETRY_STATUS_CODES,
    REQUEST_TIMEOUT,
    RETRY_STATUS_CODES,
    create_retry_decorator,
)
from brand_visibility.exceptions import CompletionAuthenticationError

# ============================================================================
# CONSTANTS TESTS
# ============================================================================


def test_max_attempts_value():
    """MAX_ATTEMPTS should be 3."""
    assert MAX_ATTEMPTS == 3


def test_backoff_is_capped():
    """Backoff runs from 1s to a low cap."""
    assert MIN_WAIT_SECONDS == 1
    assert MAX_WAIT_SECONDS == 8


def test_request_timeout_value():
    """REQUEST_TIMEOUT should be 30.0 seconds."""
    assert REQUEST_TIMEOUT == 30.0


def test_status_code_sets_disjoint():
    """No status code is both retried and failed fast."""
    assert {429, 500, 502, 503, 504} == RETRY_STATUS_CODES
    assert {400, 401, 403, 404} == NO_RETRY_STATUS_CODES
    assert not RETRY_STATUS_CODES & NO_RETRY_STATUS_CODES


# ============================================================================
# RETRY BEHAVIOR TESTS
# ============================================================================


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    """Skip real sleeping between retries."""
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


def _status_error(status_code):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


def test_retries_http_status_error_then_succeeds():
    """A transient HTTP error is retried."""
    func = Mock(side_effect=[_status_error(503), "ok"])
    wrapped = create_retry_decorator()(func)

    assert wrapped() == "ok"
    assert func.call_count == 2


def test_retries_connect_error():
    """Connection errors are retried."""
    func = Mock(side_effect=[httpx.ConnectError("refused"), "ok"])

    assert create_retry_decorator()(func)() == "ok"
    assert func.call_count == 2


def test_retries_timeout():
    """Timeouts are retried."""
    func = Mock(side_effect=[httpx.ReadTimeout("slow"), httpx.ReadTimeout("slow"), "ok"])

    assert create_retry_decorator()(func)() == "ok"
    assert func.call_count == 3


def test_stops_after_max_attempts():
    """The last exception is re-raised after MAX_ATTEMPTS."""
    func = Mock(side_effect=_status_error(500))
    wrapped = create_retry_decorator()(func)

    with pytest.raises(httpx.HTTPStatusError):
        wrapped()

    assert func.call_count == MAX_ATTEMPTS


def test_does_not_retry_other_exceptions():
    """Exceptions outside the retry set fail immediately."""
    func = Mock(side_effect=CompletionAuthenticationError("bad key"))
    wrapped = create_retry_decorator()(func)

    with pytest.raises(CompletionAuthenticationError):
        wrapped()

    assert func.call_count == 1
