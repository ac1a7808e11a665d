"""Redis connection management.

Mirrors engine.py: when REDIS_URL is set a shared connection pool is
created at import time; otherwise ``redis_pool`` is None and the progress
cache falls back to its in-memory implementation.

Redis only ever holds derived data here (cached progress reads), so losing
it costs a cache warm-up, never a learner's progress.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from lms.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Verify Redis on startup, close the pool on shutdown.

    An unreachable Redis does not stop startup: reads then miss the cache
    and go to the repositories.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured; progress cache is in-memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except Exception:
        logger.exception("Redis connection failed on startup")
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
