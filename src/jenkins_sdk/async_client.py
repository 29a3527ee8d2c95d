"""Async Jenkins client.

Same middleware as the blocking client; network I/O and retry delays are
awaited instead of blocking. Cancellation is never swallowed.
"""

import time
from asyncio import sleep
from collections.abc import Iterable, Mapping
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
from .transport import AsyncTransport, RequestBody, Response
from .types import Crumb

T = TypeVar("T")


class AsyncClient(BaseClient):
    """Async client for the Jenkins REST API.

    Example:
        async with AsyncClient.builder(url).with_crumb(300).build() as client:
            info = await client.request(system.info())
    """

    http_client_class = httpx.AsyncClient

    def __init__(
        self,
        http: httpx.AsyncClient,
        config: ClientConfig,
        *,
        hook: RequestHook | None = None,
        metrics: RequestMetrics | None = None,
    ):
        super().__init__(config, hook=hook, metrics=metrics)
        self._transport = AsyncTransport(http)

    @classmethod
    def builder(cls, base_url: str) -> "ClientBuilder[AsyncClient]":
        """Start configuring an async client.

        Raises:
            ConfigurationError: If ``base_url`` is not an absolute http(s) URL.
        """
        return ClientBuilder(base_url, cls)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "AsyncClient":
        return ClientBuilder.from_config(config, cls).build()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def request(self, endpoint: Endpoint[T]) -> T:
        """Execute an endpoint and return its parsed result.

        Raises the same errors as :meth:`Client.request`.
        """
        request = self._prepare(endpoint)
        started = time.monotonic()
        with self._inflight():
            outcome = await self._drive(self._middleware.run(request))
        return self._complete(endpoint, request, outcome, started)

    async def raw_request(  # noqa: PLR0913
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
        """Send an unmodeled request through the same middleware."""
        endpoint = self._raw_endpoint(
            method, segments, query, form, body, headers, timeout
        )
        return await self.request(endpoint)

    async def _drive(self, chain: Chain) -> Outcome:
        try:
            action = next(chain)
            while True:
                action = chain.send(await self._perform(action))
        except StopIteration as stop:
            return stop.value

    async def _perform(self, action: SendRequest | Sleep | ObtainCrumb) -> Any:
        if isinstance(action, SendRequest):
            try:
                return Outcome(response=await self._transport.send(action.request))
            except TransportError as exc:
                return Outcome(error=exc)
        if isinstance(action, Sleep):
            await sleep(action.seconds)
            return None
        return await self._obtain_crumb(action.stale)

    async def _obtain_crumb(
        self,
        stale: CachedCrumb | None,
    ) -> CachedCrumb | CrumbError:
        try:
            return await self._crumbs.afetch_or_reuse(self._fetch_crumb, stale=stale)
        except CrumbError as exc:
            return exc

    async def _fetch_crumb(self) -> Crumb:
        request = self._crumb_request()
        try:
            response = await self._transport.send(request)
        except TransportError as exc:
            raise self._crumb_fetch_failed(exc) from exc
        return self._parse_crumb(request, response)
