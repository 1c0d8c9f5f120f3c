"""Drop every cached user entry ("user:*" and "users:all") from Redis.

Usage:
    uv run python -m scripts.flush_user_cache

Requires: REDIS_URL. No database connection is opened, but DATABASE_URL
must still be set because Settings validates it on load. Useful after a
manual database edit that bypassed the API: the next reads repopulate the
cache from Postgres.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from app.core.config import get_settings
from app.infrastructure.cache.redis_cache import CacheService
from app.infrastructure.persistence.repositories.cached_user_repo import (
    invalidate_user_keys,
)


def _load_env() -> None:
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)


async def main() -> int:
    settings = get_settings()
    cache = CacheService(
        redis_url=settings.redis_url,
        operation_timeout=settings.cache_operation_timeout_seconds,
    )
    await cache.connect()
    if not cache.is_available():
        print("Redis is unreachable; nothing flushed", file=sys.stderr)
        return 1
    try:
        removed = await invalidate_user_keys(cache)
    finally:
        await cache.disconnect()
    print(f"Removed {removed} cached user keys")
    return 0


if __name__ == "__main__":
    _load_env()
    sys.exit(asyncio.run(main()))
