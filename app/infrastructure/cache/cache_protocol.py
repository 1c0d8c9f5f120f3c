"""Cache protocol and result type for the repository layer (DIP).

Cache operations never raise on backend failure; they return a CacheResult
so callers can log the failure and carry on. Only task cancellation
propagates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class CacheStatus(str, Enum):
    """Outcome of a cache operation."""

    HIT = "hit"
    MISS = "miss"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class CacheResult:
    """Result of one cache call.

    value holds the deserialized payload for HIT and the deleted-key count
    for delete_pattern. error holds the failure reason for ERROR.
    """

    status: CacheStatus
    key: str
    value: Any = None
    error: str | None = None

    @property
    def is_hit(self) -> bool:
        return self.status is CacheStatus.HIT

    @property
    def is_error(self) -> bool:
        return self.status is CacheStatus.ERROR

    @classmethod
    def hit(cls, key: str, value: Any) -> CacheResult:
        return cls(CacheStatus.HIT, key, value)

    @classmethod
    def miss(cls, key: str) -> CacheResult:
        return cls(CacheStatus.MISS, key)

    @classmethod
    def ok(cls, key: str, value: Any = None) -> CacheResult:
        return cls(CacheStatus.OK, key, value)

    @classmethod
    def failed(cls, key: str, error: str) -> CacheResult:
        return cls(CacheStatus.ERROR, key, error=error)


class CacheProtocol(Protocol):
    """Protocol for cache backends (e.g. Redis). Used by CachedUserRepository."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> CacheResult:
        """Return HIT with the deserialized value, MISS, or ERROR."""
        ...

    async def set(self, key: str, value: Any, ttl: int) -> CacheResult:
        """Store value with TTL in seconds. Last writer wins."""
        ...

    async def delete(self, key: str) -> CacheResult:
        """Remove key from cache; OK when the key was already absent."""
        ...

    async def delete_pattern(self, pattern: str) -> CacheResult:
        """Remove all keys matching a glob pattern; value is the deleted count."""
        ...
