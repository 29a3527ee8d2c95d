"""Jenkins SDK.

Typed client for the Jenkins REST API with retries, CSRF crumb handling
and a unified error model. Blocking and async clients share one request
pipeline; endpoint descriptors in :mod:`jenkins_sdk.api` work with both.

Exports:
    Client: Blocking client.
    AsyncClient: Async client.
    ClientBuilder: Fluent configuration for both clients.
    Endpoint: Descriptor of one REST call.
    RetryConfig: Retry and backoff policy.
    RequestMetrics: Prometheus request metrics.
    errors: Error taxonomy (JenkinsError and subclasses).
    api: Endpoint catalog.
"""

__version__ = "0.1.0"

from . import api, errors, types
from .async_client import AsyncClient
from .builder import ClientBuilder
from .client import Client
from .config import ClientConfig, configure_logging, load_config
from .endpoint import (
    Endpoint,
    parse_bytes,
    parse_json,
    parse_model,
    parse_none,
    parse_response,
    parse_text,
)
from .errors import (
    ApiError,
    AuthError,
    ConfigurationError,
    ConflictError,
    CrumbError,
    DecodeError,
    ErrorKind,
    HttpStatusError,
    JenkinsError,
    NotFoundError,
    RateLimitedError,
    TransportError,
    TransportErrorKind,
)
from .metrics import RequestMetrics
from .middleware import RequestContext
from .retry import RetryConfig
from .transport import RequestBody, Response

__all__ = [
    "ApiError",
    "AsyncClient",
    "AuthError",
    "Client",
    "ClientBuilder",
    "ClientConfig",
    "ConfigurationError",
    "ConflictError",
    "CrumbError",
    "DecodeError",
    "Endpoint",
    "ErrorKind",
    "HttpStatusError",
    "JenkinsError",
    "NotFoundError",
    "RateLimitedError",
    "RequestBody",
    "RequestContext",
    "RequestMetrics",
    "Response",
    "RetryConfig",
    "TransportError",
    "TransportErrorKind",
    "api",
    "configure_logging",
    "errors",
    "load_config",
    "parse_bytes",
    "parse_json",
    "parse_model",
    "parse_none",
    "parse_response",
    "parse_text",
    "types",
]
