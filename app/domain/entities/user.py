"""User domain entity.

Represents a user record independent of persistence. Identity is assigned
by the source store; the cache only shadows the values.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from app.core.constants import DEFAULT_USER_STATUS
from app.domain.exceptions import ValidationException


@dataclass(frozen=True)
class User:
    """A user as stored in the source store (id, name, email, status)."""

    id: int | None
    name: str
    email: str
    status: str = DEFAULT_USER_STATUS

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict (cache and API representation)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        """Build a User from a cached dict.

        Raises:
            ValidationException: If the dict is not a user record (missing
                keys or wrong types), e.g. a corrupted cache entry.
        """
        if not isinstance(data, dict):
            raise ValidationException("User record must be an object")
        try:
            user_id = data["id"]
            name = data["name"]
            email = data["email"]
        except KeyError as e:
            raise ValidationException(f"User record missing {e.args[0]!r}", field=e.args[0])
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise ValidationException("User id must be an integer", field="id")
        if not isinstance(name, str) or not isinstance(email, str):
            raise ValidationException("User name and email must be strings")
        status = data.get("status") or DEFAULT_USER_STATUS
        return cls(id=user_id, name=name, email=email, status=status)
