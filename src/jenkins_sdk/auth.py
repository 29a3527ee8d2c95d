"""Authentication schemes attached as a default ``Authorization`` header."""

import base64
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator


def _require_header_safe(value: SecretStr) -> SecretStr:
    secret = value.get_secret_value()
    if not secret.isascii() or any(ch in secret for ch in "\r\n"):
        msg = "credentials must be printable ASCII without line breaks"
        raise ValueError(msg)
    return value


class BasicAuth(BaseModel):
    """HTTP Basic auth with a Jenkins user and API token (or password)."""

    model_config = ConfigDict(frozen=True)

    user: str
    token: SecretStr

    _check_token = field_validator("token")(_require_header_safe)

    @field_validator("user")
    @classmethod
    def _check_user(cls, value: str) -> str:
        if ":" in value:
            msg = "basic auth user must not contain ':'"
            raise ValueError(msg)
        return value

    def header_value(self) -> str:
        """Return the ``Authorization`` header value."""
        raw = f"{self.user}:{self.token.get_secret_value()}".encode()
        return "Basic " + base64.b64encode(raw).decode("ascii")

    def secrets(self) -> tuple[str, ...]:
        """Values that must never appear in error output."""
        return (self.token.get_secret_value(), self.header_value())


class BearerAuth(BaseModel):
    """Bearer token auth, typically used behind an authenticating proxy."""

    model_config = ConfigDict(frozen=True)

    token: SecretStr

    _check_token = field_validator("token")(_require_header_safe)

    def header_value(self) -> str:
        return f"Bearer {self.token.get_secret_value()}"

    def secrets(self) -> tuple[str, ...]:
        return (self.token.get_secret_value(),)


Auth: TypeAlias = BasicAuth | BearerAuth
