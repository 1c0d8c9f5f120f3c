"""Cache: Redis service, result type and cache key utilities.

Used by CachedUserRepository as a best-effort accelerator in front of the
source store. Key format is in keys.py (DRY).
"""

from app.infrastructure.cache.cache_protocol import (
    CacheProtocol,
    CacheResult,
    CacheStatus,
)
from app.infrastructure.cache.keys import USER_KEY_PATTERN, USERS_ALL_KEY, user_key
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheProtocol",
    "CacheResult",
    "CacheService",
    "CacheStatus",
    "USERS_ALL_KEY",
    "USER_KEY_PATTERN",
    "user_key",
]
