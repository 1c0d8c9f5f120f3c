"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure (DRY). Used by
app.infrastructure.cache.keys and the user repositories.
"""

# Cache key prefixes: "user:<id>" for one record, "users:all" for the listing
CACHE_PREFIX_USER = "user"
CACHE_PREFIX_USERS = "users"
CACHE_SUFFIX_ALL = "all"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Status stored when a user is written without one (and read for NULL rows)
DEFAULT_USER_STATUS = "active"
