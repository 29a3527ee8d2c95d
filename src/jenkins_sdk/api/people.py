"""People directory endpoints."""

from typing import Any

from ..endpoint import Endpoint


def list_people(tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get("people", "api", "json").with_tree(tree)


def list_people_async(tree: str | None = None) -> Endpoint[Any]:
    """``asynchPeople`` is the non-blocking listing used on large instances."""
    return Endpoint.get("asynchPeople", "api", "json").with_tree(tree)
