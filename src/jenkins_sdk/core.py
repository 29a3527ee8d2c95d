"""State and helpers shared by the blocking and async clients."""

import contextlib
import time
from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from typing import Any, TypeVar

import httpx
import pydantic
import structlog

from .cache import CrumbCache
from .config import ClientConfig
from .diagnostics import Diagnostics
from .endpoint import Endpoint, parse_response
from .errors import CrumbError, JenkinsError, TransportError
from .metrics import RequestMetrics
from .middleware import Middleware, Outcome, RequestHook
from .transport import RequestBody, Response, TransportRequest
from .types import Crumb
from .url import BaseUrl

logger = structlog.get_logger(__name__)

T = TypeVar("T")

CRUMB_ISSUER = Endpoint.get("crumbIssuer", "api", "json")


class BaseClient:
    """Holds everything a client needs except the I/O executor.

    Subclasses provide ``request`` and drive :class:`Middleware` chains
    with blocking or awaited I/O.
    """

    http_client_class: type[httpx.Client] | type[httpx.AsyncClient]

    def __init__(
        self,
        config: ClientConfig,
        *,
        hook: RequestHook | None = None,
        metrics: RequestMetrics | None = None,
    ):
        self._base_url = BaseUrl.parse(config.base_url)
        self._config = config

        auth = config.auth()
        headers = httpx.Headers(config.default_headers)
        headers.setdefault("User-Agent", config.user_agent)
        if auth is not None:
            headers["Authorization"] = auth.header_value()
        self._default_headers = headers

        self._diagnostics = Diagnostics(
            capture_body_snippet=config.capture_body_snippet,
            max_body_snippet_bytes=config.max_body_snippet_bytes,
            secrets=auth.secrets() if auth is not None else (),
        )
        self._crumbs = (
            CrumbCache(config.crumb_ttl) if config.crumb_ttl is not None else None
        )
        self._middleware = Middleware(
            self._diagnostics,
            retry=config.retry,
            crumbs=self._crumbs is not None,
            hook=hook,
        )
        self._metrics = metrics

    @property
    def base_url(self) -> BaseUrl:
        return self._base_url

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def metrics(self) -> RequestMetrics | None:
        return self._metrics

    def _prepare(self, endpoint: Endpoint[Any]) -> TransportRequest:
        return endpoint.prepare(self._base_url, self._default_headers)

    def _raw_endpoint(  # noqa: PLR0913
        self,
        method: str,
        segments: Iterable[str],
        query: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
        form: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
        body: RequestBody | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Endpoint[Response]:
        endpoint = Endpoint(method, tuple(segments), parse_response, timeout=timeout)
        if isinstance(query, Mapping):
            query = query.items()
        for key, value in query:
            endpoint = endpoint.with_query(key, value)
        if form:
            endpoint = endpoint.with_form(form)
        if body is not None:
            endpoint = endpoint.with_body(body)
        for name, value in (headers or {}).items():
            endpoint = endpoint.with_header(name, value)
        return endpoint

    def _inflight(self) -> AbstractContextManager:
        if self._metrics is None:
            return contextlib.nullcontext()
        return self._metrics.track_inflight()

    # -----------------------------------------------------------------------
    # Crumb handshake
    # -----------------------------------------------------------------------

    def _crumb_request(self) -> TransportRequest:
        return self._prepare(CRUMB_ISSUER)

    @staticmethod
    def _crumb_fetch_failed(exc: TransportError) -> CrumbError:
        return CrumbError("failed to fetch crumb", cause=exc)

    def _parse_crumb(self, request: TransportRequest, response: Response) -> Crumb:
        """Validate a crumb issuer response.

        Raises:
            CrumbError: If the issuer answered with an error status or an
                unexpected body.
        """
        if not response.is_success:
            error = self._diagnostics.status_error(request, response)
            msg = "crumb issuer returned an error"
            raise CrumbError(msg, cause=error)
        try:
            return Crumb.model_validate_json(response.body)
        except pydantic.ValidationError as exc:
            error = self._diagnostics.decode_error(request, response, exc)
            msg = "crumb issuer returned an unexpected body"
            raise CrumbError(msg, cause=error) from exc

    # -----------------------------------------------------------------------
    # Completion
    # -----------------------------------------------------------------------

    def _complete(
        self,
        endpoint: Endpoint[T],
        request: TransportRequest,
        outcome: Outcome,
        started: float,
    ) -> T:
        """Parse a successful outcome or raise its error, recording metrics."""
        error: JenkinsError | None = outcome.error
        result: Any = None
        if error is None:
            try:
                result = endpoint.parse(outcome.response)
            except (ValueError, TypeError, KeyError) as exc:
                error = self._diagnostics.decode_error(request, outcome.response, exc)
                error.__cause__ = exc

        if outcome.response is not None:
            status_code = outcome.response.status_code
        else:
            status_code = error.status_code if error is not None else None
        duration = time.monotonic() - started

        if self._metrics is not None:
            self._metrics.record(
                request.method,
                status_code,
                duration,
                retries=outcome.retries,
                error_kind=error.kind.value if error is not None else None,
            )

        if error is not None:
            logger.warning(
                "Request failed",
                method=request.method,
                url=request.display_url,
                error_kind=error.kind.value,
                status_code=status_code,
                retries=outcome.retries,
            )
            raise error

        logger.debug(
            "Request succeeded",
            method=request.method,
            url=request.display_url,
            status_code=status_code,
            retries=outcome.retries,
            duration_seconds=round(duration, 3),
        )
        return result
