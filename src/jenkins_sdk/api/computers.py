"""Agent (computer) and executor endpoints."""

from typing import Any

from ..endpoint import Endpoint, parse_bytes, parse_model
from ..types import ExecutorsInfo


def list_computers(tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("computer", "api", "json").with_tree(tree)


def executors_info() -> Endpoint[ExecutorsInfo]:
    """Total and busy executor counts across all agents."""
    return Endpoint.get("computer", "api", "json", parser=parse_model(ExecutorsInfo))


def get(name: str, tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("computer", name, "api", "json").with_tree(tree)


def create_from_xml(name: str, xml: str | bytes) -> Endpoint[None]:
    return (
        Endpoint.post("computer", "doCreateItem")
        .with_query("name", name)
        .with_xml(xml)
    )


def copy(source: str, name: str) -> Endpoint[None]:
    return (
        Endpoint.post("computer", "doCreateItem")
        .with_query("name", name)
        .with_query("mode", "copy")
        .with_query("from", source)
    )


def toggle_offline(name: str, message: str | None = None) -> Endpoint[None]:
    endpoint = Endpoint.post("computer", name, "toggleOffline")
    if message is not None:
        endpoint = endpoint.with_query("offlineMessage", message)
    return endpoint


def delete(name: str) -> Endpoint[None]:
    return Endpoint.post("computer", name, "doDelete")


def config_xml(name: str) -> Endpoint[bytes]:
    return Endpoint.get("computer", name, "config.xml", parser=parse_bytes)


def update_config_xml(name: str, xml: str | bytes) -> Endpoint[None]:
    return Endpoint.post("computer", name, "config.xml").with_xml(xml)


def connect(name: str) -> Endpoint[None]:
    return Endpoint.post("computer", name, "connect")


def disconnect(name: str) -> Endpoint[None]:
    return Endpoint.post("computer", name, "disconnect")


def launch_agent(name: str) -> Endpoint[None]:
    return Endpoint.post("computer", name, "launchSlaveAgent")
