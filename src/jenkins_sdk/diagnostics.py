"""Error diagnostics extracted from failed responses.

Builds the request id, human readable message and truncated body snippet
that :class:`~jenkins_sdk.errors.HttpStatusError` and
:class:`~jenkins_sdk.errors.DecodeError` carry. Snippets are redacted so
credentials echoed back by a proxy never end up in logs or tracebacks.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from .errors import DecodeError, HttpStatusError
from .retry import parse_retry_after
from .transport import Response, TransportRequest
from .url import sanitize_url

DEFAULT_MAX_SNIPPET_BYTES = 4096
REDACTED = "<redacted>"

REQUEST_ID_HEADERS = (
    "x-request-id",
    "x-correlation-id",
    "x-amzn-requestid",
    "x-amz-request-id",
)
MESSAGE_KEYS = ("message", "error", "error_message", "Message", "Error")


def request_id(headers: httpx.Headers) -> str | None:
    """Return the first non-empty request correlation header."""
    for name in REQUEST_ID_HEADERS:
        value = headers.get(name, "").strip()
        if value:
            return value
    return None


def extract_message(body: bytes) -> str | None:
    """Pull an error message out of a JSON error body, if there is one."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    for key in MESSAGE_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def redact(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of each secret with a placeholder."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def truncate_utf8(body: bytes, max_bytes: int) -> str:
    """Decode at most ``max_bytes`` of ``body`` without splitting a character."""
    if len(body) <= max_bytes:
        return body.decode("utf-8", errors="replace")
    # "ignore" drops a multi-byte sequence cut in half at the boundary
    return body[:max_bytes].decode("utf-8", errors="ignore") + "..."


@dataclass(frozen=True)
class Diagnostics:
    """Turns failed responses into rich error objects.

    Attributes:
        capture_body_snippet: Whether errors carry a body snippet at all.
        max_body_snippet_bytes: Upper bound on the snippet size.
        secrets: Values redacted from snippets.
    """

    capture_body_snippet: bool = True
    max_body_snippet_bytes: int = DEFAULT_MAX_SNIPPET_BYTES
    secrets: tuple[str, ...] = field(default=(), repr=False)

    def body_snippet(self, body: bytes) -> str | None:
        if not self.capture_body_snippet or not body:
            return None
        # redact first; a secret cut in half by truncation no longer matches
        text = redact(body.decode("utf-8", errors="replace"), self.secrets)
        return truncate_utf8(text.encode("utf-8"), self.max_body_snippet_bytes)

    def status_error(
        self,
        request: TransportRequest,
        response: Response,
    ) -> HttpStatusError:
        """Build the error for a non-2xx response."""
        message = extract_message(response.body)
        if message is not None:
            message = redact(message, self.secrets)
        return HttpStatusError.for_status(
            response.status_code,
            method=request.method,
            url=sanitize_url(request.url),
            message=message,
            body=response.body,
            headers=response.headers,
            request_id=request_id(response.headers),
            body_snippet=self.body_snippet(response.body),
            retry_after=parse_retry_after(response.headers.get("retry-after")),
        )

    def decode_error(
        self,
        request: TransportRequest,
        response: Response,
        exc: Exception,
    ) -> DecodeError:
        """Build the error for a 2xx response the parser rejected."""
        return DecodeError(
            redact(str(exc), self.secrets),
            status_code=response.status_code,
            method=request.method,
            url=sanitize_url(request.url),
            request_id=request_id(response.headers),
            body_snippet=self.body_snippet(response.body),
        )
