"""ORM models. Import here so Base.metadata sees every table."""

from app.infrastructure.persistence.models.user import UserModel

__all__ = ["UserModel"]
