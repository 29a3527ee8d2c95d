"""Client builder.

Chained setters only record values and never raise. :meth:`ClientBuilder.build`
is the single fallible step: it validates the collected values and
constructs the underlying httpx client. The base URL is the exception and is
checked as soon as the builder is created, so a malformed URL never turns
into a half-configured builder.
"""

import ssl
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

import httpx
import pydantic
import structlog

from .config import ClientConfig
from .core import BaseClient
from .errors import ConfigurationError
from .metrics import RequestMetrics
from .middleware import RequestHook
from .retry import RetryConfig
from .url import BaseUrl

logger = structlog.get_logger(__name__)

C = TypeVar("C", bound=BaseClient)


class ClientBuilder(Generic[C]):
    """Accumulates client settings; see :meth:`build`."""

    def __init__(self, base_url: str, client_cls: type[C]):
        """Start a builder.

        Args:
            base_url: Jenkins root URL, e.g. ``https://ci.example.com/jenkins``.
            client_cls: Client class produced by :meth:`build`.

        Raises:
            ConfigurationError: If ``base_url`` is not a valid absolute
                http(s) URL.
        """
        self._base_url = BaseUrl.parse(base_url)
        self._client_cls = client_cls
        self._values: dict[str, Any] = {}
        self._headers: dict[str, str] = {}
        self._hook: RequestHook | None = None
        self._metrics: RequestMetrics | None = None
        self._transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        client_cls: type[C],
    ) -> "ClientBuilder[C]":
        """Seed a builder with every field explicitly set on ``config``."""
        builder = cls(config.base_url, client_cls)
        for name in config.model_fields_set - {"base_url", "default_headers"}:
            builder._values[name] = getattr(config, name)
        builder._headers.update(config.default_headers)
        return builder

    # -----------------------------------------------------------------------
    # Authentication and headers
    # -----------------------------------------------------------------------

    def auth_basic(self, user: str, token: str) -> "ClientBuilder[C]":
        """Authenticate with a user name and API token (or password)."""
        self._values.pop("bearer_token", None)
        self._values["username"] = user
        self._values["token"] = token
        return self

    def auth_bearer(self, token: str) -> "ClientBuilder[C]":
        self._values.pop("username", None)
        self._values.pop("token", None)
        self._values["bearer_token"] = token
        return self

    def user_agent(self, user_agent: str) -> "ClientBuilder[C]":
        self._values["user_agent"] = user_agent
        return self

    def default_header(self, name: str, value: str) -> "ClientBuilder[C]":
        self._headers[name] = value
        return self

    def default_headers(self, headers: Mapping[str, str]) -> "ClientBuilder[C]":
        self._headers.update(headers)
        return self

    # -----------------------------------------------------------------------
    # Network
    # -----------------------------------------------------------------------

    def timeout(self, seconds: float) -> "ClientBuilder[C]":
        self._values["timeout"] = seconds
        return self

    def connect_timeout(self, seconds: float) -> "ClientBuilder[C]":
        self._values["connect_timeout"] = seconds
        return self

    def read_timeout(self, seconds: float) -> "ClientBuilder[C]":
        self._values["read_timeout"] = seconds
        return self

    def proxy(self, url: str) -> "ClientBuilder[C]":
        self._values["proxy"] = url
        return self

    def no_system_proxy(
        self,
        enabled: bool = True,  # noqa: FBT001, FBT002
    ) -> "ClientBuilder[C]":
        """Ignore ``HTTP_PROXY``-style environment variables."""
        self._values["no_system_proxy"] = enabled
        return self

    def danger_accept_invalid_certs(
        self,
        enabled: bool = True,  # noqa: FBT001, FBT002
    ) -> "ClientBuilder[C]":
        """Disable TLS certificate verification. Only for test instances."""
        self._values["danger_accept_invalid_certs"] = enabled
        return self

    def ca_bundle(self, path: str) -> "ClientBuilder[C]":
        self._values["ca_bundle"] = str(path)
        return self

    def transport(
        self,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport,
    ) -> "ClientBuilder[C]":
        """Use a custom httpx transport, e.g. ``httpx.MockTransport`` in tests."""
        self._transport = transport
        return self

    # -----------------------------------------------------------------------
    # Middleware and diagnostics
    # -----------------------------------------------------------------------

    def with_retry(
        self,
        max_retries: int,
        base_delay: float,
        multiplier: float = 2.0,
    ) -> "ClientBuilder[C]":
        """Retry transient failures with exponential backoff.

        Args:
            max_retries: Retries after the first attempt.
            base_delay: Delay before the first retry in seconds.
            multiplier: Growth factor for each further retry.
        """
        self._values["retry"] = {
            "max_retries": max_retries,
            "base_delay": base_delay,
            "multiplier": multiplier,
        }
        return self

    def retry_config(self, config: RetryConfig) -> "ClientBuilder[C]":
        self._values["retry"] = config
        return self

    def with_crumb(self, ttl: float) -> "ClientBuilder[C]":
        """Send CSRF crumbs on state-changing requests, cached for ``ttl`` seconds."""
        self._values["crumb_ttl"] = ttl
        return self

    def request_hook(self, hook: RequestHook) -> "ClientBuilder[C]":
        """Call ``hook`` before every attempt; it may edit the headers."""
        self._hook = hook
        return self

    def metrics(self, metrics: RequestMetrics) -> "ClientBuilder[C]":
        self._metrics = metrics
        return self

    def capture_body_snippet(self, enabled: bool) -> "ClientBuilder[C]":  # noqa: FBT001
        self._values["capture_body_snippet"] = enabled
        return self

    def max_body_snippet_bytes(self, max_bytes: int) -> "ClientBuilder[C]":
        self._values["max_body_snippet_bytes"] = max_bytes
        return self

    # -----------------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------------

    def build(self) -> C:
        """Validate the configuration and construct the client.

        Raises:
            ConfigurationError: If the settings are invalid or inconsistent,
                the CA bundle cannot be loaded, or httpx rejects the
                transport settings (for example an invalid proxy URL).
        """
        values = {
            **self._values,
            "base_url": str(self._base_url),
            "default_headers": dict(self._headers),
        }
        try:
            config = ClientConfig.model_validate(values)
            config.auth()
        except pydantic.ValidationError as exc:
            msg = f"Invalid client configuration: {exc}"
            raise ConfigurationError(msg) from exc

        http = self._http_client(config)
        client = self._client_cls(http, config, hook=self._hook, metrics=self._metrics)
        logger.debug(
            "Built client",
            client=self._client_cls.__name__,
            base_url=repr(self._base_url),
            retry=config.retry is not None,
            crumbs=config.crumb_ttl is not None,
        )
        return client

    def _http_client(self, config: ClientConfig) -> httpx.Client | httpx.AsyncClient:
        verify = _tls_verify(config)
        try:
            # header values must be encodable before the first request
            httpx.Headers({**config.default_headers, "User-Agent": config.user_agent})
            return self._client_cls.http_client_class(
                timeout=httpx.Timeout(
                    config.timeout,
                    connect=config.connect_timeout,
                    read=config.read_timeout,
                ),
                verify=verify,
                proxy=config.proxy,
                trust_env=not config.no_system_proxy,
                follow_redirects=True,
                transport=self._transport,
            )
        except (ValueError, TypeError, httpx.InvalidURL) as exc:
            msg = f"Failed to construct HTTP transport: {exc}"
            raise ConfigurationError(msg) from exc


def _tls_verify(config: ClientConfig) -> bool | ssl.SSLContext:
    if config.danger_accept_invalid_certs:
        return False
    if config.ca_bundle is None:
        return True
    try:
        return ssl.create_default_context(cafile=config.ca_bundle)
    except OSError as exc:
        msg = f"Failed to load CA bundle {config.ca_bundle}: {exc}"
        raise ConfigurationError(msg) from exc
