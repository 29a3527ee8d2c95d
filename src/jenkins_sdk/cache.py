"""Thread-safe cache for the CSRF crumb.

Holds the crumb issued by the server together with its expiry. The cached
value is replaced wholesale on refresh, so readers never observe a
half-written crumb. Refreshes happen under a lock: concurrent callers that
find the crumb missing or expired wait for the single fetch in flight.
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from .types import Crumb

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CachedCrumb:
    """A crumb header and the monotonic time after which it must not be used."""

    field: str
    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CrumbCache:
    """Lazily refreshed crumb shared by all requests of one client.

    The blocking path synchronizes on a ``threading.Lock``; the async path
    on an ``asyncio.Lock`` created on first use.
    """

    def __init__(self, ttl: float):
        """Initialize the cache.

        Args:
            ttl: Seconds a fetched crumb stays valid.
        """
        self._lock = threading.Lock()
        self._async_lock: asyncio.Lock | None = None
        self._ttl = ttl
        self._crumb: CachedCrumb | None = None

    def _reusable(self, stale: CachedCrumb | None) -> CachedCrumb | None:
        crumb = self._crumb
        if crumb is None or crumb is stale:
            return None
        if crumb.is_expired(time.monotonic()):
            logger.debug("Cached crumb expired", field=crumb.field)
            return None
        return crumb

    def _install(self, crumb: Crumb, duration: float) -> CachedCrumb:
        cached = CachedCrumb(
            field=crumb.crumb_request_field,
            value=crumb.crumb,
            expires_at=time.monotonic() + self._ttl,
        )
        self._crumb = cached
        logger.debug(
            "Fetched fresh crumb",
            field=cached.field,
            duration_seconds=round(duration, 3),
        )
        return cached

    def fetch_or_reuse(
        self,
        fetch_func: Callable[[], Crumb],
        stale: CachedCrumb | None = None,
    ) -> CachedCrumb:
        """Return the cached crumb or fetch a new one.

        Args:
            fetch_func: Called under the lock when no usable crumb exists.
            stale: A crumb the server rejected. It is never returned, even
                if it has not expired yet.

        Returns:
            A crumb that was valid when it was returned.
        """
        with self._lock:
            crumb = self._reusable(stale)
            if crumb is not None:
                return crumb
            start = time.monotonic()
            fresh = fetch_func()
            return self._install(fresh, time.monotonic() - start)

    async def afetch_or_reuse(
        self,
        fetch_func: Callable[[], Awaitable[Crumb]],
        stale: CachedCrumb | None = None,
    ) -> CachedCrumb:
        """Async counterpart of :meth:`fetch_or_reuse`."""
        if self._async_lock is None:
            self._async_lock = asyncio.Lock()
        async with self._async_lock:
            crumb = self._reusable(stale)
            if crumb is not None:
                return crumb
            start = time.monotonic()
            fresh = await fetch_func()
            return self._install(fresh, time.monotonic() - start)
