"""Tests for the gateway middleware and the Redis health check with a mocked Redis client."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi import FastAPI
from redis.exceptions import ConnectionError as RedisConnectionError

from src.xp_common.redis_client import redis_available
from src.xp_gateway.middleware.rate_limit import RateLimitMiddleware
from src.xp_gateway.middleware.request_log import RequestLogMiddleware


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit_per_minute=2)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def _client(app: FastAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def redis_mock() -> AsyncMock:
    counts: dict[str, int] = {}

    async def incr(key: str) -> int:
        counts[key] = counts.get(key, 0) + 1
        return counts[key]

    mock = AsyncMock()
    mock.incr = AsyncMock(side_effect=incr)
    mock.expire = AsyncMock()
    return mock


class TestRateLimit:
    async def test_over_limit_gets_429(self, redis_mock: AsyncMock) -> None:
        with patch(
            "src.xp_gateway.middleware.rate_limit.get_redis",
            AsyncMock(return_value=redis_mock),
        ):
            async with _client(_app()) as client:
                assert (await client.get("/ping")).status_code == 200
                assert (await client.get("/ping")).status_code == 200
                resp = await client.get("/ping")
        assert resp.status_code == 429
        assert resp.json()["code"] == 9001
        assert "Retry-After" in resp.headers
        redis_mock.expire.assert_awaited_once()

    async def test_health_is_exempt(self, redis_mock: AsyncMock) -> None:
        with patch(
            "src.xp_gateway.middleware.rate_limit.get_redis",
            AsyncMock(return_value=redis_mock),
        ):
            async with _client(_app()) as client:
                for _ in range(5):
                    assert (await client.get("/health")).status_code == 200
        redis_mock.incr.assert_not_awaited()

    async def test_redis_down_lets_requests_through(self) -> None:
        broken = AsyncMock()
        broken.incr = AsyncMock(side_effect=RedisConnectionError("down"))
        with patch(
            "src.xp_gateway.middleware.rate_limit.get_redis",
            AsyncMock(return_value=broken),
        ):
            async with _client(_app()) as client:
                for _ in range(5):
                    assert (await client.get("/ping")).status_code == 200


class TestRequestLog:
    async def test_request_id_header_is_set(self) -> None:
        app = _app()
        app.add_middleware(RequestLogMiddleware)
        with patch(
            "src.xp_gateway.middleware.rate_limit.get_redis",
            AsyncMock(return_value=AsyncMock(incr=AsyncMock(return_value=1))),
        ):
            async with _client(app) as client:
                resp = await client.get("/ping")
        assert resp.status_code == 200
        assert resp.headers["X-Request-ID"].startswith("req_")
        assert len(resp.headers["X-Request-ID"]) == len("req_") + 12


class TestRedisAvailable:
    async def test_ping_ok(self) -> None:
        client = AsyncMock()
        client.ping = AsyncMock(return_value=True)
        with patch("src.xp_common.redis_client.get_redis", AsyncMock(return_value=client)):
            assert await redis_available() is True

    async def test_ping_failure_reports_false(self) -> None:
        client = AsyncMock()
        client.ping = AsyncMock(side_effect=RedisConnectionError("down"))
        with patch("src.xp_common.redis_client.get_redis", AsyncMock(return_value=client)):
            assert await redis_available() is False
