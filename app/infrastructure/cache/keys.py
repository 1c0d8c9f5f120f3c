"""Cache key builders. Single place for key format (DRY).

Two key classes exist: the per-user key "user:<id>" and the listing key
"users:all". The listing key lives under a different prefix so that the
"user:*" pattern never matches it.
"""

from app.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_USER,
    CACHE_PREFIX_USERS,
    CACHE_SUFFIX_ALL,
)

USERS_ALL_KEY = f"{CACHE_PREFIX_USERS}{CACHE_KEY_SEP}{CACHE_SUFFIX_ALL}"

USER_KEY_PATTERN = f"{CACHE_PREFIX_USER}{CACHE_KEY_SEP}*"


def user_key(user_id: int) -> str:
    """Cache key for user by ID.

    Raises:
        ValueError: If user_id is not an int (bool excluded).
    """
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise ValueError(f"user_id must be an int, got {type(user_id).__name__}")
    return f"{CACHE_PREFIX_USER}{CACHE_KEY_SEP}{user_id}"
