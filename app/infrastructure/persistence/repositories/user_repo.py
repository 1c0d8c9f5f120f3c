"""User repository: the Postgres source of truth. Interface methods return domain Users."""

from __future__ import annotations

import logging

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.user import UserData
from app.core.constants import DEFAULT_USER_STATUS
from app.domain.entities.user import User
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.user import UserModel
from app.infrastructure.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _user_to_entity(u: UserModel) -> User:
    """Map ORM UserModel to domain User (NULL status reads as the default)."""
    return User(
        id=u.id,
        name=u.name,
        email=u.email,
        status=u.status or DEFAULT_USER_STATUS,
    )


def _status_or_default(data: UserData) -> str:
    return data.status or DEFAULT_USER_STATUS


class UserRepository(BaseRepository[UserModel]):
    """CRUD over the users table. Implements IUserStore.

    Every operation commits before returning, so reads always reflect the
    latest committed write.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, UserModel)

    async def list_users(self) -> list[User]:
        async with self._transaction("list_users") as session:
            users = await self._get_all(session)
        logger.debug("Fetched %d users from database", len(users))
        return [_user_to_entity(u) for u in users]

    async def get_user(self, user_id: int) -> User:
        """Return user by id; raise ResourceNotFoundException if absent."""
        async with self._transaction("get_user") as session:
            user = await self._get_by_id(session, user_id)
            if user is None:
                raise ResourceNotFoundException("user", user_id)
            return _user_to_entity(user)

    async def create_user(self, data: UserData) -> User:
        """Insert a user (status defaulted); return it with the assigned id.

        Raises ValidationException on constraint violation (e.g. duplicate email).
        """
        async with self._transaction("create_user") as session:
            created = await self._add(
                session,
                UserModel(name=data.name, email=data.email, status=_status_or_default(data)),
            )
            result = _user_to_entity(created)
        logger.info("User created with ID: %d", result.id)
        return result

    async def update_user(self, user_id: int, data: UserData) -> User:
        """Replace name/email/status; return the row as persisted.

        Raises ResourceNotFoundException when no row has user_id and
        ValidationException on constraint violation.
        """
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(name=data.name, email=data.email, status=_status_or_default(data))
            .returning(UserModel)
        )
        async with self._transaction("update_user") as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            if row is None:
                raise ResourceNotFoundException("user", user_id)
            updated = _user_to_entity(row)
        logger.info("User %d updated", user_id)
        return updated

    async def delete_user(self, user_id: int) -> None:
        """Delete user by id; raise ResourceNotFoundException if absent."""
        stmt = delete(UserModel).where(UserModel.id == user_id).returning(UserModel.id)
        async with self._transaction("delete_user") as session:
            result = await session.execute(stmt)
            if result.scalar_one_or_none() is None:
                raise ResourceNotFoundException("user", user_id)
        logger.info("User %d deleted", user_id)
