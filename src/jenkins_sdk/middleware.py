"""Request middleware: retry and CSRF crumb handling.

The middleware is written once, as generators that yield *actions* and
receive their results:

- :class:`SendRequest` is answered with an :class:`Outcome`.
- :class:`Sleep` is answered with ``None``.
- :class:`ObtainCrumb` is answered with a
  :class:`~jenkins_sdk.cache.CachedCrumb` or a
  :class:`~jenkins_sdk.errors.CrumbError`.

The blocking client answers actions with blocking calls and the async
client with awaited ones, so retry and crumb logic never diverge between
the two modes. Layers compose with ``yield from``: retry wraps the crumb
step, which wraps the status check around the actual send.
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

import httpx
import structlog

from .cache import CachedCrumb
from .diagnostics import Diagnostics
from .errors import CrumbError, HttpStatusError, JenkinsError
from .retry import RetryConfig
from .transport import Response, TransportRequest

logger = structlog.get_logger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


@dataclass(frozen=True)
class Outcome:
    """Result of sending a request through the middleware."""

    response: Response | None = None
    error: JenkinsError | None = None
    retries: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SendRequest:
    request: TransportRequest


@dataclass(frozen=True)
class Sleep:
    seconds: float


@dataclass(frozen=True)
class ObtainCrumb:
    """Ask for a usable crumb; ``stale`` is one the server just rejected."""

    stale: CachedCrumb | None = None


Action: TypeAlias = SendRequest | Sleep | ObtainCrumb
Chain: TypeAlias = Generator[Action, Any, Outcome]


@dataclass
class RequestContext:
    """Mutable view of an outgoing attempt handed to request hooks."""

    method: str
    url: str
    headers: httpx.Headers
    attempt: int


RequestHook: TypeAlias = Callable[[RequestContext], None]


def needs_crumb(method: str) -> bool:
    """State-changing methods carry the crumb header."""
    return method.upper() not in SAFE_METHODS


def is_crumb_rejection(outcome: Outcome) -> bool:
    """Whether the server refused the request because of the crumb."""
    error = outcome.error
    return (
        isinstance(error, HttpStatusError)
        and error.status_code == 403  # noqa: PLR2004
        and b"crumb" in error.body.lower()
    )


class Middleware:
    """Composes retry and crumb handling around a single send.

    Args:
        diagnostics: Builds status errors from non-2xx responses.
        retry: Retry policy; None sends every request exactly once.
        crumbs: Whether state-changing requests need a crumb.
        hook: Called before every attempt, retries included.
    """

    def __init__(
        self,
        diagnostics: Diagnostics,
        retry: RetryConfig | None = None,
        crumbs: bool = False,  # noqa: FBT001, FBT002
        hook: RequestHook | None = None,
    ):
        self.diagnostics = diagnostics
        self.retry = retry
        self.crumbs = crumbs
        self.hook = hook

    def run(self, request: TransportRequest) -> Chain:
        """Entry point driven by the clients."""
        if self.retry is None or self.retry.max_retries == 0:
            return (yield from self._attempt(request, 1))
        return (yield from self._retrying(request, self.retry))

    def _retrying(self, request: TransportRequest, retry: RetryConfig) -> Chain:
        can_retry = retry.allows_method(request.method)
        retries = 0
        while True:
            outcome = yield from self._attempt(request, retries + 1)
            if (
                outcome.ok
                or not can_retry
                or retries >= retry.max_retries
                or not retry.should_retry(outcome.error)
            ):
                return replace(outcome, retries=retries)
            retries += 1
            delay = retry.delay_for(retries, outcome.error)
            logger.info(
                "Retrying request",
                method=request.method,
                url=request.display_url,
                retry=retries,
                max_retries=retry.max_retries,
                delay_seconds=round(delay, 3),
                reason=str(outcome.error),
            )
            if delay > 0:
                yield Sleep(delay)

    def _attempt(self, request: TransportRequest, attempt: int) -> Chain:
        if not self.crumbs or not needs_crumb(request.method):
            return (yield from self._send(request, attempt))

        crumb = yield ObtainCrumb()
        if isinstance(crumb, CrumbError):
            return Outcome(error=crumb)
        outcome = yield from self._send(
            request.with_header(crumb.field, crumb.value),
            attempt,
        )
        if not is_crumb_rejection(outcome):
            return outcome

        logger.warning(
            "Crumb rejected, refreshing",
            method=request.method,
            url=request.display_url,
        )
        crumb = yield ObtainCrumb(stale=crumb)
        if isinstance(crumb, CrumbError):
            return Outcome(error=crumb)
        outcome = yield from self._send(
            request.with_header(crumb.field, crumb.value),
            attempt,
        )
        if is_crumb_rejection(outcome):
            msg = "server rejected the crumb after a refresh"
            return Outcome(error=CrumbError(msg, cause=outcome.error))
        return outcome

    def _send(self, request: TransportRequest, attempt: int) -> Chain:
        if self.hook is not None:
            context = RequestContext(
                method=request.method,
                url=request.url,
                headers=httpx.Headers(request.headers),
                attempt=attempt,
            )
            self.hook(context)
            request = request.with_headers(context.headers)

        outcome = yield SendRequest(request)
        if outcome.ok and not outcome.response.is_success:
            error = self.diagnostics.status_error(request, outcome.response)
            return Outcome(error=error)
        return outcome
