"""Retry policy: which failures are retried and how long to wait.

Delays follow ``base_delay * multiplier ** (n - 1)`` for the n-th retry,
optionally capped by ``max_delay``. The first send is never delayed.
Jitter is off unless configured, which keeps delay sequences exact.
"""

import random
from collections.abc import Callable
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import pydantic

from .errors import CrumbError, HttpStatusError, JenkinsError, TransportError
from .errors import TransportErrorKind

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.2
DEFAULT_MULTIPLIER = 2.0
DEFAULT_MAX_DELAY = 10.0
DEFAULT_RETRY_STATUSES = frozenset({502, 503, 504})

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS", "TRACE"})
RETRYABLE_TRANSPORT_KINDS = frozenset(
    {TransportErrorKind.TIMEOUT, TransportErrorKind.CONNECT},
)


class RetryConfig(pydantic.BaseModel):
    """Retry and backoff settings for one client."""

    model_config = pydantic.ConfigDict(frozen=True)

    max_retries: int = pydantic.Field(
        DEFAULT_MAX_RETRIES,
        description="Retries after the first attempt (0 disables retrying)",
        ge=0,
    )
    base_delay: float = pydantic.Field(
        DEFAULT_BASE_DELAY,
        description="Delay before the first retry in seconds",
        ge=0,
    )
    multiplier: float = pydantic.Field(
        DEFAULT_MULTIPLIER,
        description="Growth factor applied to the delay for each further retry",
        ge=1,
    )
    max_delay: float | None = pydantic.Field(
        DEFAULT_MAX_DELAY,
        description="Upper bound for a single delay in seconds",
        ge=0,
    )
    jitter: bool = pydantic.Field(
        default=False,
        description="Pick a random delay between 0 and the computed backoff",
    )
    retry_non_idempotent: bool = pydantic.Field(
        default=False,
        description="Also retry POST and PATCH requests",
    )
    respect_retry_after: bool = pydantic.Field(
        default=True,
        description="Use the server's Retry-After header when present",
    )
    retry_statuses: frozenset[int] = pydantic.Field(
        DEFAULT_RETRY_STATUSES,
        description="5xx statuses treated as transient",
    )
    retry_on_status: Callable[[int], bool] | None = pydantic.Field(
        None,
        description="Predicate replacing retry_statuses",
        exclude=True,
    )

    def allows_method(self, method: str) -> bool:
        """Whether requests with this method may be retried at all."""
        return self.retry_non_idempotent or method.upper() in IDEMPOTENT_METHODS

    def is_retryable_status(self, status_code: int) -> bool:
        # 4xx never changes on a retry
        if status_code < 500:  # noqa: PLR2004
            return False
        if self.retry_on_status is not None:
            return self.retry_on_status(status_code)
        return status_code in self.retry_statuses

    def should_retry(self, error: JenkinsError) -> bool:
        """Classify a failed attempt as transient or terminal."""
        if isinstance(error, TransportError):
            return error.transport_kind in RETRYABLE_TRANSPORT_KINDS
        if isinstance(error, HttpStatusError):
            return self.is_retryable_status(error.status_code)
        if isinstance(error, CrumbError):
            return error.cause is not None and self.should_retry(error.cause)
        return False

    def backoff_delay(self, retry_number: int) -> float:
        """Return the deterministic delay before the given retry.

        Args:
            retry_number: 1 for the first retry, 2 for the second and so on.
                Values below 1 refer to the initial send and give 0.
        """
        if retry_number < 1:
            return 0.0
        delay = self.base_delay * self.multiplier ** (retry_number - 1)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay

    def delay_for(self, retry_number: int, error: JenkinsError) -> float:
        """Return the delay to sleep before the given retry of ``error``."""
        if (
            self.respect_retry_after
            and isinstance(error, HttpStatusError)
            and error.retry_after is not None
        ):
            return error.retry_after
        delay = self.backoff_delay(retry_number)
        if self.jitter and delay > 0:
            # full jitter
            delay = random.uniform(0, delay)  # noqa: S311
        return delay


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """Parse a ``Retry-After`` header given in seconds or as an HTTP date.

    Returns:
        Seconds to wait (never negative), or None if the header is absent
        or malformed.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.isascii() and value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max((when - now).total_seconds(), 0.0)
