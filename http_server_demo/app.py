from __future__ import annotations

from fastapi import FastAPI
from redis.asyncio import Redis

from http_server_demo import __version__
from http_server_demo.api.hello import router as hello_router
from http_server_demo.api.kv import router as kv_router
from http_server_demo.api.metrics import router as metrics_router
from http_server_demo.api.probes import router as probes_router
from http_server_demo.observability.metrics import ServerMetrics
from http_server_demo.observability.middleware import RequestMetricsMiddleware


def create_app(*, store: Redis, metrics: ServerMetrics) -> FastAPI:
    """Build the application around an already-connected store and a metrics registry."""

    app = FastAPI(title="HTTP Server Demo", version=__version__)
    app.state.store = store
    app.state.metrics = metrics

    app.add_middleware(RequestMetricsMiddleware, metrics=metrics)

    app.include_router(hello_router)
    app.include_router(kv_router)
    app.include_router(probes_router)
    app.include_router(metrics_router)
    return app
