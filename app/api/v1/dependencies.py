"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the user store. Routes depend only on
IUserStore; whether reads go through Redis is decided here.
"""

from __future__ import annotations

from fastapi import Request

from app.application.interfaces.repositories import IUserStore
from app.core.config import get_settings
from app.infrastructure.cache.redis_cache import CacheService
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import (
    CachedUserRepository,
    UserRepository,
)


def get_cache(request: Request) -> CacheService | None:
    """Return the app-wide CacheService, or None when Redis is disabled."""
    return getattr(request.app.state, "cache", None)


def get_user_store(request: Request) -> IUserStore:
    """Build the user store for this request.

    Postgres UserRepository, wrapped in CachedUserRepository when a cache is
    configured (even if currently unreachable: the cache adapter retries the
    connection and the cached store falls through to Postgres meanwhile).
    """
    source = UserRepository(get_session_factory())
    cache = get_cache(request)
    if cache is None:
        return source
    settings = get_settings()
    return CachedUserRepository(
        source,
        cache,
        user_ttl=settings.cache_ttl_user,
        list_ttl=settings.cache_ttl_users_list,
    )
