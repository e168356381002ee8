"""Redis connection pool.

Redis carries pub/sub events and rate-limit counters only, so it is
optional: an empty DBAI_REDIS_URL leaves the pool unset and every caller
skips its Redis work.
"""

import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Create the pool, or leave Redis disabled when url is empty."""
    global _pool  # noqa: PLW0603
    if not url:
        logger.info("Redis URL not set; events and rate limiting disabled")
        _pool = None
        return
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Return the pool. Raises RuntimeError when Redis is disabled or not started."""
    if _pool is None:
        msg = "Redis not initialized"
        raise RuntimeError(msg)
    return _pool


def get_optional_redis() -> redis.Redis | None:
    """Return the pool, or None so best-effort callers can skip."""
    return _pool
