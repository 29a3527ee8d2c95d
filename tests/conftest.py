"""Shared fixtures: an in-memory Jenkins served through httpx.MockTransport."""

import httpx
import pytest

BASE_URL = "https://ci.example.com/jenkins"
CRUMB_PATH = "/jenkins/crumbIssuer/api/json"


def crumb_response(value: str, field: str = "Jenkins-Crumb") -> httpx.Response:
    return httpx.Response(200, json={"crumbRequestField": field, "crumb": value})


class FakeJenkins:
    """Routes requests by method and path to queued responses.

    Each route holds a list of responses consumed in order; the last one
    repeats. An exception class in the list is raised instead, the way
    httpx raises transport errors. Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses) -> "FakeJenkins":
        self.routes.setdefault((method, path), []).extend(responses)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, text=f"not routed: {request.url.path}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, type) and issubclass(item, Exception):
            raise item("simulated failure", request=request)
        # Responses are rebuilt so a repeated route never reuses a consumed one
        return httpx.Response(
            item.status_code, headers=item.headers, content=item.content
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def jenkins() -> FakeJenkins:
    """A fresh fake server per test."""
    return FakeJenkins()
