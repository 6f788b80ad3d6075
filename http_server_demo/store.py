from __future__ import annotations

import structlog
from fastapi import Request
from redis.asyncio import Redis
from redis.exceptions import RedisError

from http_server_demo.config import Settings


logger = structlog.get_logger("store")


class StoreConnectionError(Exception):
    """Raised when the key-value store cannot be reached at startup."""


async def connect_redis(settings: Settings) -> Redis:
    """Open the process-wide Redis client and check it answers PING."""

    host, port = settings.redis_bind
    client = Redis(
        host=host,
        port=port,
        # An empty password means the server has AUTH disabled.
        password=settings.redis_password or None,
        decode_responses=True,
    )

    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        await client.aclose()
        raise StoreConnectionError(f"pinging redis client: {exc}") from exc

    logger.info("redis_connected", address=settings.redis_address)
    return client


def get_store(request: Request) -> Redis:
    return request.app.state.store
