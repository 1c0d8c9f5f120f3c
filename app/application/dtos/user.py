"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserData:
    """Write payload for create_user / update_user. The store assigns the id.

    status None (or empty) means "use the default status".
    """

    name: str
    email: str
    status: str | None = None
