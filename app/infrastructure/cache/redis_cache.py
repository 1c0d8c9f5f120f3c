"""Redis-based cache service for the user store.

Provides async Redis caching with TTL support. Values are stored as JSON.
Every operation returns a CacheResult instead of raising: a Redis outage,
a timeout or a corrupted entry comes back as CacheStatus.ERROR so that the
cached store can log it and fall through to the source of truth. Task
cancellation is never caught.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis

from app.infrastructure.cache.cache_protocol import CacheResult

logger = logging.getLogger(__name__)

# Minimum seconds between reconnect attempts while the cache is marked unavailable.
RECONNECT_INTERVAL_SECONDS = 30.0
DELETE_PATTERN_CHUNK_SIZE = 500
# delete_pattern deadline, in multiples of operation_timeout (a SCAN spans many round-trips).
DELETE_PATTERN_TIMEOUT_FACTOR = 30


class CacheService:
    """Async Redis cache service with TTL support.

    Build from a connection string (redis_url) and call connect() at startup
    and disconnect() at shutdown, or inject a ready client (tests, DI). The
    client's connection pool is shared by all concurrent callers. Connecting
    and reconnecting are serialized by one asyncio.Lock, so concurrent
    failures on the same client lead to a single replacement client.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        *,
        redis_url: str | None = None,
        max_connections: int = 10,
        operation_timeout: float = 1.0,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI. Treated as
                connected; the caller owns its lifecycle.
            redis_url: Connection string (redis://host:port/db) used by connect().
            max_connections: Pool size for clients built from redis_url.
            operation_timeout: Deadline in seconds for a single get/set/delete.
        """
        self.redis = redis_client
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.operation_timeout = operation_timeout
        self._connected = redis_client is not None
        self._last_connect_attempt = float("-inf")
        self._connect_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup.

        A failed connection only disables the cache; the service keeps
        serving from the source store.
        """
        if self.redis is not None and self._connected:
            return
        if self.redis_url is None:
            return
        self._last_connect_attempt = time.monotonic()
        client = redis.from_url(
            self.redis_url,
            decode_responses=True,
            max_connections=self.max_connections,
            socket_connect_timeout=self.operation_timeout,
            socket_timeout=self.operation_timeout,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError, OSError) as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            await client.aclose()
            self.redis = None
            self._connected = False
            return
        self.redis = client
        self._connected = True
        logger.info("Redis cache connected: %s", _redact_url(self.redis_url))

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self, failed_client: redis.Redis | None) -> bool:
        """Replace failed_client with a fresh connection. Returns True if connected.

        Serialized by _connect_lock. When another caller already replaced
        failed_client, its new client is reused instead of being closed.
        """
        if self.redis_url is None:
            return False
        async with self._connect_lock:
            if self.redis is not failed_client:
                return self.is_available()
            if failed_client is not None:
                try:
                    await failed_client.aclose()
                except (redis.RedisError, OSError) as e:
                    logger.debug("Ignoring error while closing dead Redis client: %s", e)
            self.redis = None
            self._connected = False
            await self.connect()
            return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def _ensure_available(self) -> bool:
        """Return availability, retrying connect() at most every RECONNECT_INTERVAL_SECONDS."""
        if self.is_available():
            return True
        if self.redis_url is None:
            return False
        async with self._connect_lock:
            if (
                not self.is_available()
                and time.monotonic() - self._last_connect_attempt >= RECONNECT_INTERVAL_SECONDS
            ):
                await self.connect()
        return self.is_available()

    async def _execute(
        self,
        operation: str,
        key: str,
        call: Callable[[redis.Redis], Awaitable[Any]],
        *,
        timeout: float,
    ) -> tuple[bool, Any]:
        """Run call(client) under a deadline with one reconnect on connection loss.

        Returns (True, raw_result) on success or (False, reason) on failure.
        """
        if not await self._ensure_available():
            return False, "cache unavailable"
        client = self.redis
        try:
            return True, await asyncio.wait_for(call(client), timeout=timeout)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if await self._reconnect(client):
                try:
                    return True, await asyncio.wait_for(call(self.redis), timeout=timeout)
                except (redis.RedisError, asyncio.TimeoutError) as retry_error:
                    e = retry_error
            logger.warning(
                "Cache %s unavailable for key %s (Redis disconnected): %s",
                operation,
                key,
                e,
            )
            return False, f"connection error: {e}"
        except asyncio.TimeoutError:
            logger.warning(
                "Cache %s timed out for key %s after %ss", operation, key, timeout
            )
            return False, "timeout"
        except redis.RedisError as e:
            logger.exception("Cache %s error for key %s", operation, key)
            return False, f"redis error: {e}"

    async def get(self, key: str) -> CacheResult:
        """Return HIT with the JSON-deserialized value, MISS, or ERROR.

        Args:
            key: Cache key (use app.infrastructure.cache.keys builders).

        Returns:
            CacheResult; a stored value that is not valid JSON is an ERROR.
        """
        ok, raw = await self._execute(
            "get", key, lambda r: r.get(key), timeout=self.operation_timeout
        )
        if not ok:
            return CacheResult.failed(key, raw)
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return CacheResult.miss(key)
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Cache entry for key %s is not valid JSON: %s", key, e)
            return CacheResult.failed(key, f"malformed entry: {e}")
        logger.debug("Cache HIT: %s", key)
        return CacheResult.hit(key, value)

    async def set(self, key: str, value: Any, ttl: int) -> CacheResult:
        """Store value with TTL (SETEX). Last writer wins.

        Args:
            key: Cache key.
            value: Value to cache (JSON-serializable).
            ttl: Time-to-live in seconds.

        Returns:
            OK if stored, ERROR otherwise.
        """
        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("Cache value for key %s is not serializable: %s", key, e)
            return CacheResult.failed(key, f"unserializable value: {e}")
        ok, raw = await self._execute(
            "set",
            key,
            lambda r: r.setex(key, ttl, serialized),
            timeout=self.operation_timeout,
        )
        if not ok:
            return CacheResult.failed(key, raw)
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return CacheResult.ok(key)

    async def delete(self, key: str) -> CacheResult:
        """Remove key from cache. OK whether or not the key existed.

        Args:
            key: Cache key to delete.

        Returns:
            OK with the number of removed keys (0 or 1) as value, or ERROR.
        """
        ok, raw = await self._execute(
            "delete", key, lambda r: r.delete(key), timeout=self.operation_timeout
        )
        if not ok:
            return CacheResult.failed(key, raw)
        logger.debug("Cache DELETE: %s", key)
        return CacheResult.ok(key, int(raw or 0))

    async def delete_pattern(self, pattern: str) -> CacheResult:
        """Delete all keys matching pattern using SCAN + batched UNLINK (non-blocking).

        Uses scan_iter to avoid KEYS blocking; collects keys in chunks and
        UNLINKs each chunk to minimize round-trips and keep deletion async on
        server. The whole scan runs under one deadline of
        operation_timeout * DELETE_PATTERN_TIMEOUT_FACTOR; keys already unlinked
        when it expires stay deleted.

        Args:
            pattern: Redis SCAN match pattern (e.g. user:*).

        Returns:
            OK with the number of keys deleted as value, or ERROR.
        """

        async def _scan_and_unlink(client: redis.Redis) -> int:
            deleted = 0
            chunk: list[str] = []
            async for key in client.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= DELETE_PATTERN_CHUNK_SIZE:
                    deleted += await _unlink(client, chunk)
                    chunk = []
            if chunk:
                deleted += await _unlink(client, chunk)
            return deleted

        ok, raw = await self._execute(
            "delete_pattern",
            pattern,
            _scan_and_unlink,
            timeout=self.operation_timeout * DELETE_PATTERN_TIMEOUT_FACTOR,
        )
        if not ok:
            return CacheResult.failed(pattern, raw)
        if raw > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, raw)
        return CacheResult.ok(pattern, raw)


async def _unlink(client: redis.Redis, keys: list[str]) -> int:
    async with client.pipeline(transaction=False) as pipe:
        pipe.unlink(*keys)
        results = await pipe.execute()
    return sum(int(r or 0) for r in results)


def _redact_url(url: str) -> str:
    """Hide the password part of a redis:// URL for logging."""
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    _, _, host = rest.rpartition("@")
    return f"{scheme}://***@{host}"
