"""Redis client factory — used for the expiry sweep lease only.

NOT used for balances or settlement state (those go through PostgreSQL).
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


async def try_acquire_lease(key: str, holder: str, ttl_seconds: int) -> bool:
    """SET NX EX lease. True if this holder got it.

    A Redis outage returns True: the lease only avoids redundant sweeps, the
    conditional updates in PostgreSQL keep concurrent sweeps correct.
    """
    try:
        client = await get_redis()
        return bool(await client.set(key, holder, nx=True, ex=ttl_seconds))
    except RedisError:
        logger.warning("Redis unavailable, sweeping without lease", exc_info=True)
        return True
