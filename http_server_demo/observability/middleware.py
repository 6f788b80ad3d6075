from __future__ import annotations

import uuid
from collections.abc import Iterable
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from http_server_demo.observability.metrics import ServerMetrics


# Probes and the scrape endpoint sit outside the instrumented route group.
UNINSTRUMENTED_PATHS = frozenset({"/ready", "/health", "/metrics"})


class RequestMetricsMiddleware:
    """Adds request_id context, access logs, and the request duration histogram."""

    def __init__(
        self,
        app: Callable[..., Any],
        metrics: ServerMetrics,
        excluded_paths: Iterable[str] = UNINSTRUMENTED_PATHS,
    ) -> None:
        self.app = app
        self.metrics = metrics
        self._excluded_route_paths = frozenset(excluded_paths)

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path", "")
        method = scope.get("method", "")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=method,
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0

            if self._is_instrumented(scope):
                self.metrics.observe_http_request(
                    route=path,
                    method=method,
                    status_code=status_code,
                    elapsed_ms=elapsed_ms,
                )

            structlog.get_logger("access").info(
                "http_request",
                status_code=status_code,
                elapsed_ms=round(elapsed_ms, 2),
            )

            structlog.contextvars.clear_contextvars()

    def _is_instrumented(self, scope: dict[str, Any]) -> bool:
        # The router stores the matched route in the shared scope; unmatched
        # paths never reach a route group and are not observed.
        route = scope.get("route")
        if route is None:
            return False
        return getattr(route, "path", None) not in self._excluded_route_paths
