"""Prometheus metrics for client requests.

Collectors are registered in a dedicated registry rather than the global
one, so several clients (or test cases) never collide. Pass the same
:class:`RequestMetrics` to several builders to aggregate their requests.
"""

from contextlib import AbstractContextManager

import prometheus_client

DEFAULT_NAMESPACE = "jenkins_sdk"


def status_class(status_code: int | None) -> str:
    """Bucket a status code into ``1xx``..``5xx``.

    Returns ``transport`` when no response was received and ``other`` for
    codes outside 100..599.
    """
    if status_code is None:
        return "transport"
    if 100 <= status_code < 600:  # noqa: PLR2004
        return f"{status_code // 100}xx"
    return "other"


class RequestMetrics:
    """Request counters, latency histogram and in-flight gauge."""

    def __init__(
        self,
        registry: prometheus_client.CollectorRegistry | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ):
        """Create and register the collectors.

        Args:
            registry: Target registry. A private one is created when omitted.
            namespace: Metric name prefix.
        """
        self.registry = (
            registry if registry is not None else prometheus_client.CollectorRegistry()
        )
        self._requests = prometheus_client.Counter(
            "requests",
            "Requests completed, by method and status class",
            ["method", "status_class"],
            namespace=namespace,
            registry=self.registry,
        )
        self._duration = prometheus_client.Histogram(
            "request_duration_seconds",
            "End-to-end request latency including retries",
            ["method", "status_class"],
            namespace=namespace,
            registry=self.registry,
        )
        self._retries = prometheus_client.Counter(
            "retries",
            "Retries performed",
            ["method"],
            namespace=namespace,
            registry=self.registry,
        )
        self._rate_limited = prometheus_client.Counter(
            "rate_limited",
            "Requests answered with HTTP 429",
            ["method"],
            namespace=namespace,
            registry=self.registry,
        )
        self._errors = prometheus_client.Counter(
            "errors",
            "Failed requests, by error kind",
            ["method", "kind"],
            namespace=namespace,
            registry=self.registry,
        )
        self._inflight = prometheus_client.Gauge(
            "inflight",
            "Requests currently in flight",
            namespace=namespace,
            registry=self.registry,
        )

    def track_inflight(self) -> AbstractContextManager:
        return self._inflight.track_inprogress()

    def record(
        self,
        method: str,
        status_code: int | None,
        duration: float,
        retries: int = 0,
        error_kind: str | None = None,
    ) -> None:
        """Record one finished request."""
        bucket = status_class(status_code)
        self._requests.labels(method=method, status_class=bucket).inc()
        self._duration.labels(method=method, status_class=bucket).observe(duration)
        if retries:
            self._retries.labels(method=method).inc(retries)
        if status_code == 429:  # noqa: PLR2004
            self._rate_limited.labels(method=method).inc()
        if error_kind is not None:
            self._errors.labels(method=method, kind=error_kind).inc()
