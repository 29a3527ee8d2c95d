"""HTTP transport layer on top of httpx.

Holds the concrete request and response values exchanged with the server
and the two senders (blocking and async) that execute one request on an
httpx client. httpx exceptions are mapped to
:class:`~jenkins_sdk.errors.TransportError` here and nowhere else.
"""

import json
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import httpx
import structlog

from .errors import TransportError, TransportErrorKind
from .url import sanitize_url

logger = structlog.get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
XML_CONTENT_TYPE = "application/xml"


@dataclass(frozen=True)
class RequestBody:
    """Raw request body with its declared content type."""

    content: bytes
    content_type: str | None = None

    @classmethod
    def xml(cls, document: str | bytes) -> "RequestBody":
        if isinstance(document, str):
            document = document.encode("utf-8")
        return cls(document, XML_CONTENT_TYPE)

    @classmethod
    def text(cls, text: str, content_type: str = "text/plain; charset=utf-8"):
        return cls(text.encode("utf-8"), content_type)


@dataclass(frozen=True)
class TransportRequest:
    """A fully resolved request, ready to be sent."""

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    form: tuple[tuple[str, str], ...] = ()
    body: RequestBody | None = None
    timeout: float | None = None

    def with_header(self, name: str, value: str) -> "TransportRequest":
        """Return a copy with one header set (replacing any existing value)."""
        headers = httpx.Headers(self.headers)
        headers[name] = value
        return replace(self, headers=headers)

    def with_headers(self, headers: Mapping[str, str]) -> "TransportRequest":
        return replace(self, headers=httpx.Headers(headers))

    @property
    def display_url(self) -> str:
        """URL without credentials, query or fragment."""
        return sanitize_url(self.url)


@dataclass(frozen=True)
class Response:
    """A raw HTTP response: status, headers and the full body."""

    status_code: int
    headers: httpx.Headers
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300  # noqa: PLR2004

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, replacing invalid sequences."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


def _encode(request: TransportRequest) -> tuple[httpx.Headers, bytes | None]:
    headers = httpx.Headers(request.headers)
    if request.body is not None:
        if request.body.content_type and "content-type" not in headers:
            headers["Content-Type"] = request.body.content_type
        return headers, request.body.content
    if request.form:
        headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
        return headers, str(httpx.QueryParams(list(request.form))).encode("ascii")
    return headers, None


def _build(
    http: httpx.Client | httpx.AsyncClient,
    request: TransportRequest,
) -> httpx.Request:
    headers, content = _encode(request)
    kwargs: dict[str, Any] = {"headers": headers, "content": content}
    if request.timeout is not None:
        kwargs["timeout"] = request.timeout
    return http.build_request(request.method, request.url, **kwargs)


def _transport_error(exc: httpx.HTTPError, request: TransportRequest) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        kind = TransportErrorKind.TIMEOUT
    elif isinstance(exc, (httpx.NetworkError, httpx.RemoteProtocolError)):
        kind = TransportErrorKind.CONNECT
    else:
        kind = TransportErrorKind.OTHER
    return TransportError(
        str(exc) or type(exc).__name__,
        method=request.method,
        url=request.display_url,
        transport_kind=kind,
    )


class SyncTransport:
    """Sends requests on a blocking ``httpx.Client``."""

    def __init__(self, http: httpx.Client):
        self.http = http

    def send(self, request: TransportRequest) -> Response:
        """Send one request.

        Raises:
            TransportError: If no response was received.
        """
        start_time = time.monotonic()
        logger.debug("Sending request", method=request.method, url=request.display_url)
        try:
            response = self.http.send(_build(self.http, request))
        except httpx.HTTPError as exc:
            error = _transport_error(exc, request)
            logger.debug(
                "Request failed",
                method=request.method,
                url=request.display_url,
                transport_kind=error.transport_kind.value,
                duration_seconds=round(time.monotonic() - start_time, 3),
            )
            raise error from exc
        logger.debug(
            "Request completed",
            method=request.method,
            url=request.display_url,
            status_code=response.status_code,
            duration_seconds=round(time.monotonic() - start_time, 3),
        )
        return Response(response.status_code, response.headers, response.content)

    def close(self) -> None:
        self.http.close()


class AsyncTransport:
    """Sends requests on an ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def send(self, request: TransportRequest) -> Response:
        start_time = time.monotonic()
        logger.debug("Sending request", method=request.method, url=request.display_url)
        try:
            response = await self.http.send(_build(self.http, request))
        except httpx.HTTPError as exc:
            error = _transport_error(exc, request)
            logger.debug(
                "Request failed",
                method=request.method,
                url=request.display_url,
                transport_kind=error.transport_kind.value,
                duration_seconds=round(time.monotonic() - start_time, 3),
            )
            raise error from exc
        logger.debug(
            "Request completed",
            method=request.method,
            url=request.display_url,
            status_code=response.status_code,
            duration_seconds=round(time.monotonic() - start_time, 3),
        )
        return Response(response.status_code, response.headers, response.content)

    async def aclose(self) -> None:
        await self.http.aclose()
