"""Shared Redis connection for the per-user request counters.

Balances, escrow and the rate snapshot never touch Redis; losing it only
disables rate limiting (the middleware fails open).
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
        )
    return _client


async def redis_available() -> bool:
    """Ping Redis; False instead of raising so /health can report degraded."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except RedisError:
        logger.warning("Redis ping failed", exc_info=True)
        return False


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is None:
        return
    await _client.aclose()
    _client = None
