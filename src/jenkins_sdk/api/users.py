"""User endpoints."""

from typing import Any

from ..endpoint import Endpoint, parse_bytes, parse_model
from ..types import WhoAmI


def get(user_id: str, tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("user", user_id, "api", "json").with_tree(tree)


def who_am_i() -> Endpoint[WhoAmI]:
    """The identity Jenkins resolved for the configured credentials."""
    return Endpoint.get("whoAmI", "api", "json", parser=parse_model(WhoAmI))


def config_xml(user_id: str) -> Endpoint[bytes]:
    return Endpoint.get("user", user_id, "config.xml", parser=parse_bytes)


def update_config_xml(user_id: str, xml: str | bytes) -> Endpoint[None]:
    return Endpoint.post("user", user_id, "config.xml").with_xml(xml)
