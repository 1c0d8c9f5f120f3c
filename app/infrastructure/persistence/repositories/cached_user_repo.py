"""Cache-aside user store: read-through on miss, invalidate on write.

Wraps any IUserStore (the source of truth) with a CacheProtocol. The cache is
advisory: every cache call yields a CacheResult that is logged when it
failed and then discarded, so a cache outage costs latency, never
correctness or availability. Errors from the source store propagate
unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from app.application.dtos.user import UserData
from app.application.interfaces.repositories import IUserStore
from app.domain.entities.user import User
from app.domain.exceptions import CacheDegradedException, ValidationException
from app.infrastructure.cache.cache_protocol import CacheProtocol, CacheResult
from app.infrastructure.cache.keys import USER_KEY_PATTERN, USERS_ALL_KEY, user_key

logger = logging.getLogger(__name__)

DEFAULT_USER_TTL = 600
DEFAULT_LIST_TTL = 300


class CachedUserRepository:
    """IUserStore with cache-aside reads and write-invalidate mutations.

    Keys: "user:<id>" (TTL user_ttl) and "users:all" (TTL list_ttl). Reads
    try the cache first and populate it from the source on MISS or ERROR.
    Negative results are never cached. create_user seeds the new user's key;
    update_user and delete_user delete (not overwrite) the user key, and
    every mutation deletes the listing key.

    Stateless and reentrant: no locks. A read that misses can race a
    concurrent write and repopulate "user:<id>" with the pre-write value just
    after the write invalidated it. That staleness window is accepted and
    bounded by user_ttl.
    """

    def __init__(
        self,
        source: IUserStore,
        cache: CacheProtocol,
        *,
        user_ttl: int = DEFAULT_USER_TTL,
        list_ttl: int = DEFAULT_LIST_TTL,
    ) -> None:
        self.source = source
        self.cache = cache
        self.user_ttl = user_ttl
        self.list_ttl = list_ttl

    async def list_users(self) -> list[User]:
        """Return all users, from "users:all" when cached."""
        lookup = await _attempt("get", USERS_ALL_KEY, lambda: self.cache.get(USERS_ALL_KEY))
        if lookup.is_hit:
            users = self._decode_list(lookup)
            if users is not None:
                logger.debug("Returning %d users from cache", len(users))
                return users

        users = await self.source.list_users()
        payload = [u.to_dict() for u in users]
        await _attempt(
            "set", USERS_ALL_KEY, lambda: self.cache.set(USERS_ALL_KEY, payload, self.list_ttl)
        )
        return users

    async def get_user(self, user_id: int) -> User:
        """Return one user, from "user:<id>" when cached.

        ResourceNotFoundException from the source propagates and leaves no
        cache entry behind.
        """
        key = user_key(user_id)
        lookup = await _attempt("get", key, lambda: self.cache.get(key))
        if lookup.is_hit:
            user = self._decode_user(lookup)
            if user is not None:
                logger.debug("Returning user %d from cache", user_id)
                return user

        user = await self.source.get_user(user_id)
        await _attempt("set", key, lambda: self.cache.set(key, user.to_dict(), self.user_ttl))
        return user

    async def create_user(self, data: UserData) -> User:
        """Create in the source, drop the listing, seed the new user's key."""
        created = await self.source.create_user(data)
        await _attempt("delete", USERS_ALL_KEY, lambda: self.cache.delete(USERS_ALL_KEY))
        if created.id is not None:
            key = user_key(created.id)
            await _attempt(
                "set", key, lambda: self.cache.set(key, created.to_dict(), self.user_ttl)
            )
        return created

    async def update_user(self, user_id: int, data: UserData) -> User:
        """Update in the source, then delete the user key and the listing.

        The persisted row may differ from data (defaults, triggers), so the
        next read repopulates from the source instead of writing data here.
        """
        updated = await self.source.update_user(user_id, data)
        await self._invalidate(user_id)
        return updated

    async def delete_user(self, user_id: int) -> None:
        """Delete in the source, then delete the user key and the listing."""
        await self.source.delete_user(user_id)
        await self._invalidate(user_id)

    async def invalidate_all(self) -> int:
        """Drop every "user:*" key and the listing. Returns the number of keys removed."""
        return await invalidate_user_keys(self.cache)

    async def _invalidate(self, user_id: int) -> None:
        key = user_key(user_id)
        await _attempt("delete", key, lambda: self.cache.delete(key))
        await _attempt("delete", USERS_ALL_KEY, lambda: self.cache.delete(USERS_ALL_KEY))

    def _decode_user(self, lookup: CacheResult) -> User | None:
        try:
            return User.from_dict(lookup.value)
        except ValidationException as e:
            _log_degraded("decode", lookup.key, e.message)
            return None

    def _decode_list(self, lookup: CacheResult) -> list[User] | None:
        value: Any = lookup.value
        if not isinstance(value, list):
            _log_degraded("decode", lookup.key, "listing is not an array")
            return None
        try:
            return [User.from_dict(item) for item in value]
        except ValidationException as e:
            _log_degraded("decode", lookup.key, e.message)
            return None


async def invalidate_user_keys(cache: CacheProtocol) -> int:
    """Drop every "user:*" key and "users:all" from cache; never touches the source.

    Returns the number of keys removed; failed deletes count as zero.
    """
    removed = 0
    for result in (
        await _attempt(
            "delete_pattern", USER_KEY_PATTERN, lambda: cache.delete_pattern(USER_KEY_PATTERN)
        ),
        await _attempt("delete", USERS_ALL_KEY, lambda: cache.delete(USERS_ALL_KEY)),
    ):
        if not result.is_error:
            removed += int(result.value or 0)
    return removed


async def _attempt(
    operation: str, key: str, call: Callable[[], Awaitable[CacheResult]]
) -> CacheResult:
    """Run one cache call; log and return an ERROR result instead of raising.

    Adapters report failures as ERROR results; an adapter that raises
    anyway is handled the same way. Cancellation still propagates.
    """
    try:
        result = await call()
    except Exception as e:
        result = CacheResult.failed(key, f"{type(e).__name__}: {e}")
    if result.is_error:
        _log_degraded(operation, key, result.error)
    return result


def _log_degraded(operation: str, key: str, reason: str | None) -> None:
    degraded = CacheDegradedException(operation, key, reason)
    logger.warning("%s (%s); continuing without cache", degraded.message, reason or "unknown")
