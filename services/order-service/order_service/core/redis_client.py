"""
Order Service — Redis connection for the idempotency cache

One lazily created asyncio client per process. Redis is optional at
runtime: order creation still dedupes on the stored client_ref when the
cache is unreachable.
"""
import asyncio

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from order_service.core.config import get_settings

settings = get_settings()

_redis_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
        )
    return _redis_client


def set_redis(client: aioredis.Redis | None) -> None:
    """Install a specific client (e.g. fakeredis in tests); None resets to lazy creation."""
    global _redis_client
    _redis_client = client


async def ping_redis() -> str:
    """'ok' or a short degraded reason, never raises."""
    try:
        await asyncio.wait_for(get_redis().ping(), timeout=settings.HEALTH_CHECK_TIMEOUT)
    except (RedisError, OSError, asyncio.TimeoutError) as exc:
        return f"degraded: {str(exc)[:100] or type(exc).__name__}"
    return "ok"


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
