"""Build queue endpoints."""

from typing import Any

from ..endpoint import Endpoint


def list_items(tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("queue", "api", "json").with_tree(tree)


def item(item_id: int | str, tree: str | None = None) -> Endpoint[Any]:
    """A single queue item, e.g. the one returned by ``jobs.build``."""
    return Endpoint.get("queue", "item", str(item_id), "api", "json").with_tree(tree)


def cancel(item_id: int | str) -> Endpoint[None]:
    return Endpoint.post("queue", "cancelItem").with_query("id", item_id)
