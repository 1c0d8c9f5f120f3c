"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (logging, Redis
cache, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, then the Redis cache (if enabled). A cache that cannot
    connect leaves caching degraded; the service still starts.
    Shutdown: cache disconnect, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    if settings.redis_enabled:
        from app.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(
            redis_url=settings.redis_url,
            max_connections=settings.redis_max_connections,
            operation_timeout=settings.cache_operation_timeout_seconds,
        )
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None
        logger.info("Redis cache disabled; serving users from the database only")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    from app.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
