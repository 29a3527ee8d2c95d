"""Base URL validation and path joining."""

from collections.abc import Iterable
from urllib.parse import quote, urlsplit, urlunsplit

import httpx

from .errors import ConfigurationError

ALLOWED_SCHEMES = ("http", "https")
DOT_SEGMENTS = (".", "..")


class BaseUrl:
    """A validated absolute http(s) URL that request paths are joined onto.

    The stored form always ends with exactly one ``/``, so
    ``https://ci/jenkins``, ``https://ci/jenkins/`` and
    ``https://ci/jenkins//`` all produce the same request URLs.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    @classmethod
    def parse(cls, raw: str) -> "BaseUrl":
        """Validate and normalize a base URL.

        Args:
            raw: User supplied URL, with or without a sub-path.

        Returns:
            The normalized base URL.

        Raises:
            ConfigurationError: If the URL is not an absolute http(s) URL
                with a host, or carries a query string or fragment.
        """
        try:
            url = httpx.URL(raw.strip())
        except (httpx.InvalidURL, TypeError) as exc:
            msg = f"Invalid base URL {raw!r}: {exc}"
            raise ConfigurationError(msg) from exc

        if url.scheme not in ALLOWED_SCHEMES:
            msg = f"Invalid base URL {raw!r}: expected an absolute http(s) URL"
            raise ConfigurationError(msg)
        if not url.host:
            msg = f"Invalid base URL {raw!r}: missing host"
            raise ConfigurationError(msg)
        if url.query or url.fragment:
            msg = "base_url must not include query or fragment"
            raise ConfigurationError(msg)

        return cls(str(url).rstrip("/") + "/")

    def join(self, segments: Iterable[str]) -> str:
        """Append percent-encoded path segments to the base URL.

        Each segment is encoded on its own, so a ``/`` inside a job name
        never becomes an extra path level, and ``.`` or ``..`` never
        removes one. Empty segments are skipped.
        """
        encoded = "/".join(_quote_segment(segment) for segment in segments if segment)
        return self._value + encoded

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"BaseUrl({sanitize_url(self._value)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseUrl):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)


def _quote_segment(segment: str) -> str:
    if segment in DOT_SEGMENTS:
        return segment.replace(".", "%2E")
    return quote(segment, safe="")


def sanitize_url(url: str) -> str:
    """Strip credentials, query string and fragment from a URL.

    Used for every URL that ends up in an error message or a log event.
    """
    parts = urlsplit(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, "", ""))
