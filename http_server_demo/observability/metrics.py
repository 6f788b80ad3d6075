from __future__ import annotations

from fastapi import Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


SERVER_NAME = "http-server-demo"
HTTP_SCHEME = "http"

# Milliseconds.
DURATION_BUCKETS = (0.5, 1, 5, 10, 25, 50, 100, 300, 500, 1000, 5000)


class ServerMetrics:
    """Prometheus collectors for one application instance.

    Built once at startup and handed to the app factory; each instance owns
    its registry, so nothing leaks between instances.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)

        self.hello_requests = Counter(
            "hello_request",
            "Number of requests",
            registry=self.registry,
        )
        self.http_server_duration = Histogram(
            "http_server_duration",
            "HTTP server request duration histogram in milliseconds",
            ["http_scheme", "http_server_name", "http_route", "http_method", "http_status_code"],
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )

    def observe_http_request(self, *, route: str, method: str, status_code: int, elapsed_ms: float) -> None:
        self.http_server_duration.labels(
            http_scheme=HTTP_SCHEME,
            http_server_name=SERVER_NAME,
            http_route=route,
            http_method=method,
            http_status_code=str(status_code),
        ).observe(elapsed_ms)

    def render(self) -> tuple[bytes, str]:
        """Return the exposition payload and its content type."""

        return generate_latest(self.registry), CONTENT_TYPE_LATEST


def get_server_metrics(request: Request) -> ServerMetrics:
    return request.app.state.metrics
