"""Instance level endpoints."""

from typing import Any

from ..endpoint import Endpoint, parse_bytes, parse_model
from ..types import Crumb, WhoAmI


def info(tree: str | None = None) -> Endpoint[Any]:
    """``GET /api/json``"""
    return Endpoint.get("api", "json").with_tree(tree)


def overall_load(tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("overallLoad", "api", "json").with_tree(tree)


def load_statistics(tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("loadStatistics", "api", "json").with_tree(tree)


def who_am_i() -> Endpoint[WhoAmI]:
    return Endpoint.get("whoAmI", "api", "json", parser=parse_model(WhoAmI))


def crumb() -> Endpoint[Crumb]:
    """``GET /crumbIssuer/api/json``, the CSRF crumb for the caller's session."""
    return Endpoint.get("crumbIssuer", "api", "json", parser=parse_model(Crumb))


def agent_jar() -> Endpoint[bytes]:
    return Endpoint.get("jnlpJars", "agent.jar", parser=parse_bytes)


def cli_jar() -> Endpoint[bytes]:
    return Endpoint.get("jnlpJars", "jenkins-cli.jar", parser=parse_bytes)


def config_xml() -> Endpoint[bytes]:
    return Endpoint.get("config.xml", parser=parse_bytes)


def update_config_xml(xml: str | bytes) -> Endpoint[None]:
    return Endpoint.post("config.xml").with_xml(xml)


# Lifecycle actions. Jenkins answers most of them with a redirect to the
# dashboard, which the client follows.


def quiet_down() -> Endpoint[None]:
    return Endpoint.post("quietDown")


def cancel_quiet_down() -> Endpoint[None]:
    return Endpoint.post("cancelQuietDown")


def reload() -> Endpoint[None]:
    return Endpoint.post("reload")


def safe_restart() -> Endpoint[None]:
    return Endpoint.post("safeRestart")


def restart() -> Endpoint[None]:
    return Endpoint.post("restart")


def exit() -> Endpoint[None]:  # noqa: A001
    return Endpoint.post("exit")
