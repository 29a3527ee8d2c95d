"""Error taxonomy for the Jenkins client.

Every failure raised by a request, whether it comes from the network, the
HTTP status, response decoding or the CSRF crumb handshake, is a subclass
of :class:`JenkinsError`. Callers can branch on the concrete class or on
the ``kind`` attribute.
"""

import enum

import httpx


class ErrorKind(str, enum.Enum):
    """Coarse failure category shared by all client errors."""

    TRANSPORT = "transport"
    STATUS = "status"
    DECODE = "decode"
    CRUMB = "crumb"
    CONFIGURATION = "configuration"


class TransportErrorKind(str, enum.Enum):
    """Classification of a failed send."""

    TIMEOUT = "timeout"
    CONNECT = "connect"
    OTHER = "other"


class JenkinsError(Exception):
    """Base class for every error raised by the client."""

    kind: ErrorKind

    @property
    def status_code(self) -> int | None:
        """HTTP status associated with the error, if any."""
        return None


class ConfigurationError(JenkinsError):
    """Invalid client configuration detected at build time."""

    kind = ErrorKind.CONFIGURATION


class TransportError(JenkinsError):
    """The request failed before any response was received."""

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        transport_kind: TransportErrorKind = TransportErrorKind.OTHER,
    ):
        super().__init__(message)
        self.message = message
        self.method = method
        self.url = url
        self.transport_kind = transport_kind

    def __str__(self) -> str:
        return (
            f"{self.transport_kind.value} error ({self.method} {self.url}): "
            f"{self.message}"
        )


class HttpStatusError(JenkinsError):
    """The server answered with a status outside the 2xx range."""

    kind = ErrorKind.STATUS

    def __init__(  # noqa: PLR0913
        self,
        status_code: int,
        *,
        method: str,
        url: str,
        message: str | None = None,
        body: bytes = b"",
        headers: httpx.Headers | None = None,
        request_id: str | None = None,
        body_snippet: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message or f"HTTP {status_code}")
        self._status_code = status_code
        self.method = method
        self.url = url
        self.message = message or default_reason(status_code)
        self.body = body
        self.headers = headers if headers is not None else httpx.Headers()
        self.request_id = request_id
        self.body_snippet = body_snippet
        self.retry_after = retry_after

    @property
    def status_code(self) -> int:
        return self._status_code

    def __str__(self) -> str:
        text = f"HTTP {self.status_code} ({self.method} {self.url}): {self.message}"
        if self.request_id:
            text += f" [request-id: {self.request_id}]"
        return text

    @classmethod
    def for_status(cls, status_code: int, **kwargs) -> "HttpStatusError":
        """Build the most specific subclass for a status code."""
        error_cls = _STATUS_CLASSES.get(status_code, ApiError)
        return error_cls(status_code, **kwargs)


class AuthError(HttpStatusError):
    """Authentication or authorization failed (401 or 403)."""


class NotFoundError(HttpStatusError):
    """The addressed resource does not exist (404)."""


class ConflictError(HttpStatusError):
    """The resource is in a conflicting state (409 or 412)."""


class RateLimitedError(HttpStatusError):
    """The server throttled the request (429)."""


class ApiError(HttpStatusError):
    """Any other non-success status."""


_STATUS_CLASSES: dict[int, type[HttpStatusError]] = {
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    409: ConflictError,
    412: ConflictError,
    429: RateLimitedError,
}


def default_reason(status_code: int) -> str:
    """Return a short reason phrase for a status code."""
    if status_code in (401, 403):
        return "authentication or authorization failed"
    if status_code == 404:  # noqa: PLR2004
        return "resource not found"
    if status_code in (409, 412):
        return "conflict"
    if status_code == 429:  # noqa: PLR2004
        return "rate limited"
    return "request failed"


class DecodeError(JenkinsError):
    """A 2xx response body could not be parsed into the expected shape."""

    kind = ErrorKind.DECODE

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        status_code: int,
        method: str,
        url: str,
        request_id: str | None = None,
        body_snippet: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self._status_code = status_code
        self.method = method
        self.url = url
        self.request_id = request_id
        self.body_snippet = body_snippet

    @property
    def status_code(self) -> int:
        return self._status_code

    def __str__(self) -> str:
        text = (
            f"decode error (HTTP {self.status_code}, {self.method} {self.url}): "
            f"{self.message}"
        )
        if self.request_id:
            text += f" [request-id: {self.request_id}]"
        return text


class CrumbError(JenkinsError):
    """The CSRF crumb handshake failed.

    Raised when the crumb could not be fetched or when the server keeps
    rejecting it after one refresh. ``cause`` holds the underlying error.
    """

    kind = ErrorKind.CRUMB

    def __init__(self, message: str, *, cause: JenkinsError | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def status_code(self) -> int | None:
        return self.cause.status_code if self.cause is not None else None

    def __str__(self) -> str:
        if self.cause is None:
            return f"crumb error: {self.message}"
        return f"crumb error: {self.message}: {self.cause}"
