"""Domain layer: entities and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import User
from app.domain.exceptions import (
    CacheDegradedException,
    ResourceNotFoundException,
    SourceUnavailableException,
    UserServiceException,
    ValidationException,
)

__all__ = [
    # Entities
    "User",
    # Exceptions
    "CacheDegradedException",
    "ResourceNotFoundException",
    "SourceUnavailableException",
    "UserServiceException",
    "ValidationException",
]
