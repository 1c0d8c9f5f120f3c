"""User ORM model. Table: users."""

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base


class UserModel(Base):
    """User row. id is assigned by the database; email is unique.

    status is nullable for rows written before it existed; readers map NULL
    to the default status.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    status: Mapped[str | None] = mapped_column(
        String(50), nullable=True, server_default=text("'active'")
    )
