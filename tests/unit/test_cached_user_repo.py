"""Tests for CachedUserRepository (cache-aside reads, write invalidation, degraded cache)."""

import logging

import pytest

from app.application.dtos.user import UserData
from app.domain.entities.user import User
from app.domain.exceptions import ResourceNotFoundException, SourceUnavailableException
from app.infrastructure.cache.keys import USERS_ALL_KEY, user_key
from app.infrastructure.persistence.repositories import CachedUserRepository
from app.infrastructure.persistence.repositories.cached_user_repo import invalidate_user_keys
from tests.fakes import InMemoryCache, InMemoryUserStore

JANE = UserData(name="Jane", email="jane@example.com")
JOHN = UserData(name="John", email="john@example.com")


async def _seed(store: InMemoryUserStore, *items: UserData) -> list[User]:
    """Create users directly in the source (bypassing the cache)."""
    created = [await store.create_user(d) for d in items]
    store.calls.clear()
    return created


# --- reads ---


async def test_get_user_miss_reads_source_and_populates_key(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """Cold get_user reads the source once and stores user:<id> with the user TTL."""
    (jane,) = await _seed(source, JANE)

    user = await cached_store.get_user(jane.id)

    assert user == jane
    assert source.calls["get_user"] == 1
    assert cache.value(user_key(jane.id)) == jane.to_dict()
    assert cache.ttls[user_key(jane.id)] == 600


async def test_get_user_hit_skips_source(
    cached_store: CachedUserRepository, source: InMemoryUserStore
) -> None:
    """Second get_user is served from cache with no source call."""
    (jane,) = await _seed(source, JANE)
    await cached_store.get_user(jane.id)

    again = await cached_store.get_user(jane.id)

    assert again == jane
    assert source.calls["get_user"] == 1


async def test_list_users_miss_then_hit(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """list_users populates users:all with the list TTL, then serves from it."""
    users = await _seed(source, JANE, JOHN)

    first = await cached_store.list_users()
    second = await cached_store.list_users()

    assert first == users
    assert second == users
    assert source.calls["list_users"] == 1
    assert cache.value(USERS_ALL_KEY) == [u.to_dict() for u in users]
    assert cache.ttls[USERS_ALL_KEY] == 300


async def test_list_users_empty_is_cached(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """An empty listing is a real result and is cached as an empty array."""
    assert await cached_store.list_users() == []
    assert await cached_store.list_users() == []
    assert source.calls["list_users"] == 1
    assert cache.value(USERS_ALL_KEY) == []


async def test_reads_after_flush_match_source(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """After the cache is emptied, reads return exactly the source contents."""
    users = await _seed(source, JANE, JOHN)
    await cached_store.list_users()
    await cached_store.get_user(users[0].id)
    cache.entries.clear()

    assert await cached_store.list_users() == users
    assert await cached_store.get_user(users[1].id) == users[1]


async def test_get_user_not_found_is_not_cached(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """NotFound propagates and no user:<id> entry is written; next read asks the source again."""
    with pytest.raises(ResourceNotFoundException):
        await cached_store.get_user(42)
    assert user_key(42) not in cache.entries
    assert ("set", user_key(42)) not in cache.calls

    with pytest.raises(ResourceNotFoundException):
        await cached_store.get_user(42)
    assert source.calls["get_user"] == 2


async def test_malformed_user_entry_falls_through_to_source(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """A cached value that is not a user record is treated like a miss and overwritten."""
    (jane,) = await _seed(source, JANE)
    cache.entries[user_key(jane.id)] = '{"unexpected": true}'

    user = await cached_store.get_user(jane.id)

    assert user == jane
    assert source.calls["get_user"] == 1
    assert cache.value(user_key(jane.id)) == jane.to_dict()


async def test_non_json_entry_falls_through_to_source(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """An entry that is not valid JSON (ERROR from the cache) is read from the source."""
    (jane,) = await _seed(source, JANE)
    cache.entries[user_key(jane.id)] = "{not json"

    assert await cached_store.get_user(jane.id) == jane
    assert source.calls["get_user"] == 1


async def test_malformed_listing_falls_through_to_source(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """users:all holding a non-array or a bad item is ignored and repopulated."""
    users = await _seed(source, JANE)
    cache.entries[USERS_ALL_KEY] = '{"id": 1}'
    assert await cached_store.list_users() == users

    cache.entries[USERS_ALL_KEY] = '[{"id": "one", "name": "x", "email": "y"}]'
    assert await cached_store.list_users() == users
    assert source.calls["list_users"] == 2


# --- writes ---


async def test_create_jane_scenario(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """create Jane: id 1, status active, listing dropped, get_user(1) served from cache."""
    await cached_store.list_users()
    assert USERS_ALL_KEY in cache.entries

    created = await cached_store.create_user(JANE)

    assert created == User(id=1, name="Jane", email="jane@example.com", status="active")
    assert USERS_ALL_KEY not in cache.entries
    source.calls.clear()
    assert await cached_store.get_user(1) == created
    assert sum(source.calls.values()) == 0


async def test_create_then_list_includes_new_user(
    cached_store: CachedUserRepository, source: InMemoryUserStore
) -> None:
    """A cached listing never hides a user created after it."""
    await _seed(source, JOHN)
    await cached_store.list_users()

    jane = await cached_store.create_user(JANE)

    assert jane in await cached_store.list_users()


async def test_update_then_get_reflects_new_name(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """update deletes user:<id>; the next get reads the new name from the source and repopulates."""
    (jane,) = await _seed(source, JANE)
    await cached_store.get_user(jane.id)
    await cached_store.list_users()

    await cached_store.update_user(jane.id, UserData(name="Jane Smith", email=jane.email))

    assert user_key(jane.id) not in cache.entries
    assert USERS_ALL_KEY not in cache.entries
    source.calls.clear()
    user = await cached_store.get_user(jane.id)
    assert user.name == "Jane Smith"
    assert source.calls["get_user"] == 1
    assert cache.value(user_key(jane.id))["name"] == "Jane Smith"


async def test_delete_invalidates_both_keys(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """delete removes user:<id> and users:all; a later get is NotFound from the source."""
    (jane,) = await _seed(source, JANE)
    await cached_store.get_user(jane.id)
    await cached_store.list_users()

    await cached_store.delete_user(jane.id)

    assert user_key(jane.id) not in cache.entries
    assert USERS_ALL_KEY not in cache.entries
    with pytest.raises(ResourceNotFoundException):
        await cached_store.get_user(jane.id)
    assert await cached_store.list_users() == []


async def test_delete_missing_user_makes_no_cache_calls(
    cached_store: CachedUserRepository, cache: InMemoryCache
) -> None:
    """delete_user(99) on an empty store raises NotFound and never touches the cache."""
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await cached_store.delete_user(99)
    assert exc_info.value.details["resource_id"] == 99
    assert cache.calls == []


async def test_update_missing_user_makes_no_cache_calls(
    cached_store: CachedUserRepository, cache: InMemoryCache
) -> None:
    """update_user on a missing id raises NotFound and never touches the cache."""
    with pytest.raises(ResourceNotFoundException):
        await cached_store.update_user(7, JANE)
    assert cache.calls == []


async def test_source_unavailable_propagates_without_cache_writes(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """A source outage is fatal to the call and leaves the cache untouched."""
    source.unavailable = True
    with pytest.raises(SourceUnavailableException):
        await cached_store.create_user(JANE)
    with pytest.raises(SourceUnavailableException):
        await cached_store.list_users()
    assert cache.entries == {}


# --- degraded cache ---


@pytest.mark.parametrize("mode", ["failing", "raising"])
async def test_cache_failure_is_transparent(mode: str, caplog: pytest.LogCaptureFixture) -> None:
    """With every cache call failing, all operations behave as if there were no cache."""
    source = InMemoryUserStore()
    cache = InMemoryCache(**{mode: True})
    store = CachedUserRepository(source, cache)

    with caplog.at_level(logging.WARNING):
        jane = await store.create_user(JANE)
        assert await store.get_user(jane.id) == jane
        assert await store.list_users() == [jane]
        updated = await store.update_user(jane.id, UserData(name="J", email=jane.email))
        assert await store.get_user(jane.id) == updated
        await store.delete_user(jane.id)
        with pytest.raises(ResourceNotFoundException):
            await store.get_user(jane.id)

    assert source.calls["get_user"] == 3
    assert "continuing without cache" in caplog.text


async def test_invalidate_all_removes_user_keys_and_listing(
    cached_store: CachedUserRepository, source: InMemoryUserStore, cache: InMemoryCache
) -> None:
    """invalidate_all drops every user:* key and users:all, and reports the count."""
    users = await _seed(source, JANE, JOHN)
    for u in users:
        await cached_store.get_user(u.id)
    await cached_store.list_users()

    removed = await cached_store.invalidate_all()

    assert removed == 3
    assert cache.entries == {}


async def test_invalidate_all_with_failing_cache_returns_zero() -> None:
    """invalidate_all does not raise when the cache is down."""
    store = CachedUserRepository(InMemoryUserStore(), InMemoryCache(failing=True))
    assert await store.invalidate_all() == 0


async def test_invalidate_user_keys_needs_only_the_cache() -> None:
    """Bulk invalidation works on a bare cache and leaves unrelated keys alone."""
    cache = InMemoryCache()
    cache.entries.update(
        {"user:1": "{}", "user:2": "{}", USERS_ALL_KEY: "[]", "session:9": "{}"}
    )

    removed = await invalidate_user_keys(cache)

    assert removed == 3
    assert list(cache.entries) == ["session:9"]
