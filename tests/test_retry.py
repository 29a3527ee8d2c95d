"""Tests for the retry policy: classification, backoff and Retry-After."""

from datetime import datetime, timezone
from unittest.mock import patch

import pydantic
import pytest

from jenkins_sdk.errors import (
    CrumbError,
    DecodeError,
    HttpStatusError,
    TransportError,
    TransportErrorKind,
)
from jenkins_sdk.retry import RetryConfig, parse_retry_after


def status_error(status_code: int, retry_after: float | None = None) -> HttpStatusError:
    return HttpStatusError.for_status(
        status_code,
        method="GET",
        url="https://ci/api/json",
        retry_after=retry_after,
    )


def transport_error(kind: TransportErrorKind) -> TransportError:
    return TransportError("boom", method="GET", url="https://ci/", transport_kind=kind)


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------


def test_backoff_sequence_is_exact():
    """base 0.3 and multiplier 2 give 0.3, 0.6, 1.2."""
    config = RetryConfig(max_retries=3, base_delay=0.3, multiplier=2)

    assert [config.backoff_delay(n) for n in (1, 2, 3)] == [0.3, 0.6, 1.2]


def test_first_send_has_no_delay():
    """Retry number 0 refers to the initial send."""
    assert RetryConfig().backoff_delay(0) == 0.0


def test_backoff_is_capped():
    """max_delay bounds every delay."""
    config = RetryConfig(base_delay=1.0, multiplier=10, max_delay=5.0)

    assert config.backoff_delay(3) == 5.0


def test_no_cap_when_max_delay_is_none():
    """Without a cap the delay grows unbounded."""
    config = RetryConfig(base_delay=1.0, multiplier=10, max_delay=None)

    assert config.backoff_delay(3) == 100.0


@patch("jenkins_sdk.retry.random.uniform", return_value=0.05)
def test_jitter_draws_below_the_backoff(mock_uniform):
    """Full jitter picks a value between 0 and the computed delay."""
    config = RetryConfig(base_delay=0.2, jitter=True)

    delay = config.delay_for(2, transport_error(TransportErrorKind.CONNECT))

    assert delay == 0.05
    mock_uniform.assert_called_once_with(0, 0.4)


def test_retry_after_overrides_backoff():
    """A Retry-After value on the error replaces the computed delay."""
    config = RetryConfig(base_delay=0.2)

    assert config.delay_for(1, status_error(503, retry_after=7.0)) == 7.0


def test_retry_after_ignored_when_disabled():
    """respect_retry_after=False keeps the exponential delay."""
    config = RetryConfig(base_delay=0.2, respect_retry_after=False)

    assert config.delay_for(1, status_error(503, retry_after=7.0)) == 0.2


def test_negative_values_are_rejected():
    """Counts and delays are validated by pydantic."""
    with pytest.raises(pydantic.ValidationError):
        RetryConfig(max_retries=-1)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (TransportErrorKind.TIMEOUT, True),
        (TransportErrorKind.CONNECT, True),
        (TransportErrorKind.OTHER, False),
    ],
)
def test_transport_errors(kind, expected):
    """Timeouts and connection failures are transient."""
    assert RetryConfig().should_retry(transport_error(kind)) is expected


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 409, 429])
def test_client_errors_are_terminal(status_code):
    """4xx is never retried, 429 included."""
    assert RetryConfig().should_retry(status_error(status_code)) is False


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [(500, False), (502, True), (503, True), (504, True), (501, False)],
)
def test_default_retryable_statuses(status_code, expected):
    """Only 502, 503 and 504 are transient by default."""
    assert RetryConfig().should_retry(status_error(status_code)) is expected


def test_status_predicate_replaces_defaults():
    """A custom predicate decides which 5xx are retried."""
    config = RetryConfig(retry_on_status=lambda status: status == 500)

    assert config.should_retry(status_error(500)) is True
    assert config.should_retry(status_error(503)) is False


def test_predicate_cannot_make_4xx_retryable():
    """The predicate only sees 5xx statuses."""
    config = RetryConfig(retry_on_status=lambda status: True)

    assert config.should_retry(status_error(404)) is False


def test_decode_errors_are_terminal():
    """Decode failures are never retried."""
    error = DecodeError("bad", status_code=200, method="GET", url="https://ci/")

    assert RetryConfig().should_retry(error) is False


def test_crumb_error_follows_its_cause():
    """A crumb failure is retried only when its cause is transient."""
    config = RetryConfig()
    transient = CrumbError("x", cause=transport_error(TransportErrorKind.TIMEOUT))
    terminal = CrumbError("x", cause=status_error(403))

    assert config.should_retry(transient) is True
    assert config.should_retry(terminal) is False


@pytest.mark.parametrize(
    ("method", "non_idempotent", "expected"),
    [
        ("GET", False, True),
        ("PUT", False, True),
        ("POST", False, False),
        ("POST", True, True),
    ],
)
def test_method_gating(method, non_idempotent, expected):
    """POST is retried only with retry_non_idempotent."""
    config = RetryConfig(retry_non_idempotent=non_idempotent)

    assert config.allows_method(method) is expected


# ---------------------------------------------------------------------------
# Retry-After parsing
# ---------------------------------------------------------------------------


def test_retry_after_seconds():
    """Delta-seconds form."""
    assert parse_retry_after("120") == 120.0


def test_retry_after_http_date():
    """HTTP-date form is converted relative to now."""
    now = datetime(2015, 10, 21, 7, 28, 0, tzinfo=timezone.utc)

    assert parse_retry_after("Wed, 21 Oct 2015 07:28:30 GMT", now=now) == 30.0


def test_retry_after_in_the_past_is_zero():
    """Dates in the past never produce negative delays."""
    now = datetime(2016, 1, 1, tzinfo=timezone.utc)

    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", now=now) == 0.0


@pytest.mark.parametrize("value", [None, "", "soon", "-5", "\u00b2", "\u0663"])
def test_retry_after_invalid(value):
    """Absent or malformed headers give None."""
    assert parse_retry_after(value) is None
