"""View endpoints."""

from typing import Any

from ..endpoint import Endpoint, parse_bytes

VIEW_LIST_TREE = "views[name,url]"


def list_views() -> Endpoint[Any]:
    return Endpoint.get("api", "json").with_query("tree", VIEW_LIST_TREE)


def get(name: str, tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("view", name, "api", "json").with_tree(tree)


def create_from_xml(name: str, xml: str | bytes) -> Endpoint[None]:
    return Endpoint.post("createView").with_query("name", name).with_xml(xml)


def delete(name: str) -> Endpoint[None]:
    return Endpoint.post("view", name, "doDelete")


def rename(name: str, new_name: str) -> Endpoint[None]:
    return Endpoint.post("view", name, "doRename").with_query("newName", new_name)


def add_job(view: str, job: str) -> Endpoint[None]:
    return Endpoint.post("view", view, "addJobToView").with_query("name", job)


def remove_job(view: str, job: str) -> Endpoint[None]:
    return Endpoint.post("view", view, "removeJobFromView").with_query("name", job)


def config_xml(name: str) -> Endpoint[bytes]:
    return Endpoint.get("view", name, "config.xml", parser=parse_bytes)


def update_config_xml(name: str, xml: str | bytes) -> Endpoint[None]:
    return Endpoint.post("view", name, "config.xml").with_xml(xml)
