"""Blocking Jenkins client.

Requests and retry delays block the calling thread. Code running inside
an event loop should use :class:`~jenkins_sdk.async_client.AsyncClient`
or offload calls to a worker thread.
"""

import time
from collections.abc import Iterable, Mapping
from time import sleep
from typing import Any, TypeVar

import httpx

from .builder import ClientBuilder
from .cache import CachedCrumb
from .config import ClientConfig
from .core import BaseClient
from .endpoint import Endpoint
from .errors import CrumbError, TransportError
from .metrics import RequestMetrics
from .middleware import Chain, ObtainCrumb, Outcome, RequestHook, SendRequest, Sleep
from .transport import RequestBody, Response, SyncTransport
from .types import Crumb

T = TypeVar("T")


class Client(BaseClient):
    """Blocking client for the Jenkins REST API.

    Safe to share between threads. Use :meth:`builder` to create one:

        client = (
            Client.builder("https://ci.example.com/jenkins")
            .auth_basic("alice", "api-token")
            .with_retry(3, 0.3)
            .with_crumb(300)
            .build()
        )
        job = client.request(jobs.get("demo"))
    """

    http_client_class = httpx.Client

    def __init__(
        self,
        http: httpx.Client,
        config: ClientConfig,
        *,
        hook: RequestHook | None = None,
        metrics: RequestMetrics | None = None,
    ):
        super().__init__(config, hook=hook, metrics=metrics)
        self._transport = SyncTransport(http)

    @classmethod
    def builder(cls, base_url: str) -> "ClientBuilder[Client]":
        """Start configuring a client.

        Raises:
            ConfigurationError: If ``base_url`` is not an absolute http(s) URL.
        """
        return ClientBuilder(base_url, cls)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "Client":
        return ClientBuilder.from_config(config, cls).build()

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and release the connection pool."""
        self.close()

    def close(self) -> None:
        self._transport.close()

    def request(self, endpoint: Endpoint[T]) -> T:
        """Execute an endpoint and return its parsed result.

        Raises:
            TransportError: No response was received.
            HttpStatusError: The final response had a non-2xx status.
            DecodeError: The 2xx body did not match the endpoint's parser.
            CrumbError: The CSRF crumb could not be obtained or was refused.
        """
        request = self._prepare(endpoint)
        started = time.monotonic()
        with self._inflight():
            outcome = self._drive(self._middleware.run(request))
        return self._complete(endpoint, request, outcome, started)

    def raw_request(  # noqa: PLR0913
        self,
        method: str,
        segments: Iterable[str],
        *,
        query: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
        form: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
        body: RequestBody | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Response:
        """Send an unmodeled request through the same middleware.

        Non-2xx responses still raise :class:`HttpStatusError`.
        """
        endpoint = self._raw_endpoint(
            method, segments, query, form, body, headers, timeout
        )
        return self.request(endpoint)

    def _drive(self, chain: Chain) -> Outcome:
        try:
            action = next(chain)
            while True:
                action = chain.send(self._perform(action))
        except StopIteration as stop:
            return stop.value

    def _perform(self, action: SendRequest | Sleep | ObtainCrumb) -> Any:
        if isinstance(action, SendRequest):
            try:
                return Outcome(response=self._transport.send(action.request))
            except TransportError as exc:
                return Outcome(error=exc)
        if isinstance(action, Sleep):
            sleep(action.seconds)
            return None
        return self._obtain_crumb(action.stale)

    def _obtain_crumb(self, stale: CachedCrumb | None) -> CachedCrumb | CrumbError:
        try:
            return self._crumbs.fetch_or_reuse(self._fetch_crumb, stale=stale)
        except CrumbError as exc:
            return exc

    def _fetch_crumb(self) -> Crumb:
        request = self._crumb_request()
        try:
            response = self._transport.send(request)
        except TransportError as exc:
            raise self._crumb_fetch_failed(exc) from exc
        return self._parse_crumb(request, response)
