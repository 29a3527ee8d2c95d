"""Client configuration and logging setup.

:class:`ClientConfig` is the validated form of everything a
:class:`~jenkins_sdk.builder.ClientBuilder` collects. It can also be
loaded from a JSON file, which is convenient for scripts and services that
keep Jenkins credentials outside the code.
"""

import json
import logging
import os
import pathlib

import pydantic
import structlog

from . import __version__
from .auth import Auth, BasicAuth, BearerAuth
from .diagnostics import DEFAULT_MAX_SNIPPET_BYTES
from .retry import RetryConfig

CONFIG_ENV_VAR = "JENKINS_SDK_CONFIG_PATH"

DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"jenkins-sdk/{__version__}"


class ClientConfig(pydantic.BaseModel):
    """Configuration for a Jenkins client."""

    base_url: str = pydantic.Field(description="Jenkins root URL, sub-path allowed")
    username: str | None = pydantic.Field(None, description="Basic auth user")
    token: pydantic.SecretStr | None = pydantic.Field(
        None,
        description="API token or password for basic auth",
    )
    bearer_token: pydantic.SecretStr | None = pydantic.Field(
        None,
        description="Bearer token, exclusive with basic auth",
    )
    user_agent: str = pydantic.Field(DEFAULT_USER_AGENT, description="User-Agent")
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Overall request timeout in seconds",
        gt=0,
    )
    connect_timeout: float = pydantic.Field(
        DEFAULT_CONNECT_TIMEOUT,
        description="Connect timeout in seconds",
        gt=0,
    )
    read_timeout: float = pydantic.Field(
        DEFAULT_READ_TIMEOUT,
        description="Read timeout in seconds",
        gt=0,
    )
    proxy: str | None = pydantic.Field(None, description="Explicit proxy URL")
    no_system_proxy: bool = pydantic.Field(
        default=False,
        description="Ignore proxy settings from the environment",
    )
    danger_accept_invalid_certs: bool = pydantic.Field(
        default=False,
        description="Disable TLS certificate verification",
    )
    ca_bundle: str | None = pydantic.Field(
        None,
        description="PEM file with additional trusted certificates",
    )
    default_headers: dict[str, str] = pydantic.Field(
        default_factory=dict,
        description="Headers sent with every request",
    )
    capture_body_snippet: bool = pydantic.Field(
        default=True,
        description="Attach a redacted body snippet to errors",
    )
    max_body_snippet_bytes: int = pydantic.Field(
        DEFAULT_MAX_SNIPPET_BYTES,
        description="Maximum body snippet size",
        ge=0,
    )
    retry: RetryConfig | None = pydantic.Field(
        None,
        description="Retry policy; requests are sent once when unset",
    )
    crumb_ttl: float | None = pydantic.Field(
        None,
        description="Enable CSRF crumbs, cached for this many seconds",
        ge=0,
    )

    @pydantic.model_validator(mode="after")
    def _check_consistency(self) -> "ClientConfig":
        if (self.username is None) != (self.token is None):
            msg = "basic auth needs both username and token"
            raise ValueError(msg)
        if self.username is not None and self.bearer_token is not None:
            msg = "basic auth and bearer auth are mutually exclusive"
            raise ValueError(msg)
        if self.danger_accept_invalid_certs and self.ca_bundle is not None:
            msg = "conflicting TLS settings: ca_bundle with certificate checks disabled"
            raise ValueError(msg)
        return self

    def auth(self) -> Auth | None:
        """Build the configured auth scheme, if any.

        Raises:
            pydantic.ValidationError: If the credentials cannot be sent in
                an HTTP header.
        """
        if self.username is not None and self.token is not None:
            return BasicAuth(user=self.username, token=self.token)
        if self.bearer_token is not None:
            return BearerAuth(token=self.bearer_token)
        return None


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output.

    The library itself never calls this; applications opt in.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str | None = None) -> ClientConfig:
    """Load configuration from a JSON file.

    Args:
        config_path: File to read. Defaults to the path in the
            ``JENKINS_SDK_CONFIG_PATH`` environment variable.

    Raises:
        ValueError: If no path was given and the variable is unset.
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the content is not a valid config.
    """
    config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
    if not config_path:
        msg = f"No config path given and {CONFIG_ENV_VAR} is not set"
        raise ValueError(msg)

    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return ClientConfig(**data)
