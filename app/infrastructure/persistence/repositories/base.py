"""Base repository: per-operation transactions and driver-error translation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.exceptions import SourceUnavailableException, ValidationException
from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with a transactional session scope and row helpers.

    Each public operation of a subclass runs in its own transaction opened by
    _transaction(): committed before the operation returns, rolled back on
    error. Callers therefore only observe committed state, and the repository
    holds no per-request state (one instance can serve concurrent callers).
    """

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession], model: type[ModelType]
    ) -> None:
        self.session_factory = session_factory
        self.model = model

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Yield a session inside BEGIN/COMMIT with domain error translation.

        IntegrityError and DataError become ValidationException; connection
        loss, driver timeouts and socket errors become
        SourceUnavailableException. Domain exceptions raised by the body
        (e.g. ResourceNotFoundException) roll back and propagate unchanged.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except (IntegrityError, DataError) as e:
            raise ValidationException(_driver_message(e))
        except (OperationalError, InterfaceError) as e:
            raise SourceUnavailableException(operation, _driver_message(e))
        except DBAPIError as e:
            if e.connection_invalidated:
                raise SourceUnavailableException(operation, _driver_message(e))
            raise
        except (OSError, TimeoutError) as e:
            raise SourceUnavailableException(operation, str(e) or type(e).__name__)

    async def _get_by_id(self, session: AsyncSession, entity_id: Any) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await session.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _get_all(self, session: AsyncSession) -> list[ModelType]:
        """Return all records ordered by primary key."""
        model: Any = self.model
        result = await session.execute(select(self.model).order_by(model.id))
        return list(result.scalars().all())

    async def _add(self, session: AsyncSession, obj: ModelType) -> ModelType:
        """Persist a new record; flush and refresh so the id and server defaults are loaded."""
        session.add(obj)
        await session.flush()
        await session.refresh(obj)
        return obj


def _driver_message(error: DBAPIError) -> str:
    """Return the driver's message without SQLAlchemy's statement/params suffix."""
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)
