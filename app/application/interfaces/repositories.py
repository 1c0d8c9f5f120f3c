"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.user import UserData
    from app.domain.entities.user import User


class IUserStore(Protocol):
    """CRUD contract over users (DIP).

    Implemented by the Postgres-backed UserRepository (source of truth) and by
    CachedUserRepository (cache-aside wrapper). Callers cannot tell them apart.

    Errors are raised, not returned: ResourceNotFoundException when the id is
    absent, ValidationException for malformed or constraint-violating input,
    SourceUnavailableException when the source store cannot be reached.
    """

    async def list_users(self) -> list[User]:
        """Return all users ordered by id."""

    async def get_user(self, user_id: int) -> User:
        """Return one user; raise ResourceNotFoundException if absent."""

    async def create_user(self, data: UserData) -> User:
        """Create a user and return it with the assigned id and defaulted status."""

    async def update_user(self, user_id: int, data: UserData) -> User:
        """Replace name/email/status; return the persisted user."""

    async def delete_user(self, user_id: int) -> None:
        """Delete a user; raise ResourceNotFoundException if absent."""
