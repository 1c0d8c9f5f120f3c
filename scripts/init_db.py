"""Create the users table and optionally seed sample users.

Usage:
    uv run python -m scripts.init_db [--seed]

Requires: DATABASE_URL (Postgres). Existing tables are left untouched; with
--seed, sample users whose email is already present are skipped.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from app.application.dtos.user import UserData
from app.domain.exceptions import ValidationException
from app.infrastructure.persistence import database
from app.infrastructure.persistence.models import UserModel  # noqa: F401 (registers table)
from app.infrastructure.persistence.repositories.user_repo import UserRepository

SAMPLE_USERS = [
    UserData(name="John Doe", email="john@example.com"),
    UserData(name="Jane Doe", email="jane@example.com"),
]


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_URL when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def main(seed: bool) -> None:
    session_factory = database.get_session_factory()
    assert database.engine is not None
    async with database.engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all)
    print("Table 'users' ready")

    if seed:
        repo = UserRepository(session_factory)
        for data in SAMPLE_USERS:
            try:
                user = await repo.create_user(data)
                print(f"Created user {user.id}: {user.name} <{user.email}>")
            except ValidationException as e:
                print(f"Skipped {data.email}: {e.message}")

    await database.dispose_engine()


if __name__ == "__main__":
    _load_env()
    asyncio.run(main(seed="--seed" in sys.argv[1:]))
