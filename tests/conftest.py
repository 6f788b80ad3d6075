from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from http_server_demo.app import create_app
from http_server_demo.config import get_settings
from http_server_demo.observability.metrics import ServerMetrics


class MockRedis:
    """In-memory stand-in for ``redis.asyncio.Redis`` (decode_responses=True)."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.calls: list[tuple] = []
        self.fail = False
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("Error 111 connecting to redis. Connection refused.")

    async def ping(self) -> bool:
        self.calls.append(("ping",))
        self._check()
        return True

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.calls.append(("set", key, value, ex))
        self._check()
        self.data[key] = value
        return True

    async def get(self, key: str) -> str | None:
        self.calls.append(("get", key))
        self._check()
        return self.data.get(key)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)
    for name in ("SERVER_ADDRESS", "SERVER_READ_TIMEOUT", "SERVER_WRITE_TIMEOUT", "REDIS_ADDRESS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REDIS_PASSWORD", "test-password")
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def store() -> MockRedis:
    return MockRedis()


@pytest.fixture
def metrics() -> ServerMetrics:
    return ServerMetrics()


@pytest.fixture
def app(store: MockRedis, metrics: ServerMetrics) -> FastAPI:
    return create_app(store=store, metrics=metrics)


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
