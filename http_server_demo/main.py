from __future__ import annotations

import asyncio

import structlog

from http_server_demo.app import create_app
from http_server_demo.config import ConfigError, load_settings
from http_server_demo.observability.logging import configure_logging, set_log_level
from http_server_demo.observability.metrics import ServerMetrics
from http_server_demo.server import build_server, install_signal_handlers, serve_until
from http_server_demo.store import StoreConnectionError, connect_redis


logger = structlog.get_logger("main")


async def run() -> None:
    configure_logging()
    logger.info("starting_server")

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.critical("failed_to_load_config", error=str(exc))
        raise SystemExit(1) from exc
    set_log_level(settings.log_level_number)

    try:
        store = await connect_redis(settings)
    except StoreConnectionError as exc:
        logger.critical("failed_to_connect_with_redis", error=str(exc))
        raise SystemExit(1) from exc

    try:
        app = create_app(store=store, metrics=ServerMetrics())
        server = build_server(app, settings)

        stop = asyncio.Event()
        install_signal_handlers(stop)
        await serve_until(server, stop, address=settings.server_address)
    finally:
        await store.aclose()
        logger.info("server_stopped")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
