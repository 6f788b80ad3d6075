from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Generator

import structlog
import uvicorn
from fastapi import FastAPI

from http_server_demo.config import Settings


SHUTDOWN_TIMEOUT = 5.0
# Time uvicorn gets to tear down after force_exit before its task is cancelled.
FORCE_EXIT_GRACE = 0.5

logger = structlog.get_logger("server")


class Server(uvicorn.Server):
    """uvicorn server that leaves SIGINT/SIGTERM to the caller."""

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        yield


def build_server(app: FastAPI, settings: Settings) -> Server:
    host, port = settings.server_bind
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        timeout_keep_alive=max(1, round(settings.server_read_timeout)),
        lifespan="off",
        log_config=None,
        access_log=False,
    )
    # uvicorn has no per-response write deadline; the write timeout is reported only.
    logger.debug(
        "server_configured",
        read_timeout=settings.server_read_timeout,
        write_timeout=settings.server_write_timeout,
    )
    return Server(config)


def install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)


async def serve_until(
    server: Server,
    stop: asyncio.Event,
    address: str = "",
    timeout: float = SHUTDOWN_TIMEOUT,
) -> None:
    """Serve in a background task until ``stop`` is set, then drain for at most ``timeout`` seconds.

    A drain that overruns is logged and ``force_exit`` is set; if uvicorn still
    has not returned after ``FORCE_EXIT_GRACE`` its task is cancelled. The error
    is not raised.
    """

    serve_task = asyncio.create_task(server.serve())
    logger.info("server_listening", address=address)

    stop_task = asyncio.create_task(stop.wait())
    done, _ = await asyncio.wait({serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

    if serve_task in done:
        stop_task.cancel()
        exc = serve_task.exception()
        if exc is not None:
            logger.error("failed_to_listen_and_serve", error=str(exc))
        return

    logger.info("shutting_down_server")
    server.should_exit = True
    done, _ = await asyncio.wait({serve_task}, timeout=timeout)
    if done:
        exc = serve_task.exception()
        if exc is not None:
            logger.error("failed_to_shut_down_server", error=str(exc))
        return

    logger.error(
        "failed_to_shut_down_server",
        error=f"graceful shutdown did not finish within {timeout}s",
    )
    server.force_exit = True
    try:
        await asyncio.wait_for(serve_task, timeout=FORCE_EXIT_GRACE)
    except asyncio.TimeoutError:
        logger.error("server_cancelled_after_force_exit")
