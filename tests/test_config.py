"""Tests for configuration loading, validation and logging setup."""

import json

import pydantic
import pytest
import structlog

from jenkins_sdk import Client, config
from jenkins_sdk.auth import BasicAuth, BearerAuth
from jenkins_sdk.config import ClientConfig, load_config


def write_config(tmp_path, data: dict):
    path = tmp_path / "jenkins.json"
    path.write_text(json.dumps(data))
    return path


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


def test_load_config_from_path(tmp_path):
    """Values from the file override the defaults."""
    path = write_config(
        tmp_path,
        {
            "base_url": "https://ci.example.com/jenkins",
            "username": "alice",
            "token": "tok",
            "retry": {"max_retries": 2, "base_delay": 0.5},
            "crumb_ttl": 300,
        },
    )

    result = load_config(str(path))

    assert result.username == "alice"
    assert result.token.get_secret_value() == "tok"
    assert result.retry.max_retries == 2
    assert result.retry.multiplier == 2.0
    assert result.crumb_ttl == 300
    assert result.timeout == config.DEFAULT_TIMEOUT


def test_load_config_from_env_var(tmp_path, monkeypatch):
    """The environment variable is used when no path is given."""
    path = write_config(tmp_path, {"base_url": "https://ci.example.com"})
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))

    assert load_config().base_url == "https://ci.example.com"


def test_load_config_without_path(monkeypatch):
    """Neither argument nor environment variable is an error."""
    monkeypatch.delenv(config.CONFIG_ENV_VAR, raising=False)

    with pytest.raises(ValueError, match=config.CONFIG_ENV_VAR):
        load_config()


def test_load_config_missing_file(tmp_path):
    """A path that does not exist raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


def test_load_config_invalid_content(tmp_path):
    """Schema violations surface as pydantic validation errors."""
    path = write_config(tmp_path, {"base_url": "https://ci", "timeout": 0})

    with pytest.raises(pydantic.ValidationError):
        load_config(str(path))


# ---------------------------------------------------------------------------
# ClientConfig validation
# ---------------------------------------------------------------------------


def test_defaults():
    """A bare config uses the documented defaults."""
    result = ClientConfig(base_url="https://ci")

    assert result.user_agent.startswith("jenkins-sdk/")
    assert result.retry is None
    assert result.crumb_ttl is None
    assert result.capture_body_snippet is True
    assert result.auth() is None


def test_username_requires_token():
    """Basic auth needs both halves."""
    with pytest.raises(pydantic.ValidationError, match="username and token"):
        ClientConfig(base_url="https://ci", username="alice")


def test_basic_and_bearer_are_exclusive():
    """Only one auth scheme may be configured."""
    with pytest.raises(pydantic.ValidationError, match="mutually exclusive"):
        ClientConfig(
            base_url="https://ci",
            username="alice",
            token="tok",
            bearer_token="abc",
        )


def test_auth_schemes():
    """auth() returns the configured scheme."""
    basic = ClientConfig(base_url="https://ci", username="alice", token="tok")
    bearer = ClientConfig(base_url="https://ci", bearer_token="abc")

    assert isinstance(basic.auth(), BasicAuth)
    assert basic.auth().header_value() == "Basic YWxpY2U6dG9r"
    assert isinstance(bearer.auth(), BearerAuth)


def test_user_name_with_colon_rejected():
    """A colon would make the basic credentials ambiguous."""
    settings = ClientConfig(base_url="https://ci", username="a:b", token="tok")

    with pytest.raises(pydantic.ValidationError):
        settings.auth()


def test_token_is_hidden_in_repr():
    """Secrets never appear in the config's repr."""
    settings = ClientConfig(base_url="https://ci", username="alice", token="s3cr3t")

    assert "s3cr3t" not in repr(settings)


# ---------------------------------------------------------------------------
# Client from config
# ---------------------------------------------------------------------------


def test_client_from_config(tmp_path):
    """A loaded config builds a client with the same settings."""
    path = write_config(
        tmp_path,
        {
            "base_url": "https://ci.example.com/jenkins/",
            "bearer_token": "abc",
            "default_headers": {"X-Team": "infra"},
            "crumb_ttl": 60,
        },
    )

    client = Client.from_config(load_config(str(path)))

    assert str(client.base_url) == "https://ci.example.com/jenkins/"
    assert client.config.crumb_ttl == 60
    assert client.config.default_headers == {"X-Team": "infra"}
    assert client.config.bearer_token.get_secret_value() == "abc"
    client.close()


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def test_configure_logging_filters_below_level(capsys):
    """Events below the configured level are dropped; others are logfmt."""
    config.configure_logging("warning")
    try:
        log = structlog.get_logger("test")
        log.info("hidden event")
        log.warning("Request failed", status_code=503)

        output = capsys.readouterr().out
        assert "hidden event" not in output
        assert 'msg="Request failed"' in output
        assert "status_code=503" in output
        assert "level=warning" in output
    finally:
        structlog.reset_defaults()
