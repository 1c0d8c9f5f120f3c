"""Domain exceptions for the user service.

Defines domain-level exceptions for the user CRUD contract. These exceptions
are independent of infrastructure concerns. Presentation layer maps them to
HTTP responses in exception handlers.

Taxonomy:
    ResourceNotFoundException: id absent in the source store (never raised
        from cache state).
    ValidationException: malformed or constraint-violating input.
    SourceUnavailableException: source store unreachable; fatal to the call.
    CacheDegradedException: cache unreachable or returned malformed data;
        logged by the cached store and never propagated to callers.
"""

from typing import Any


class UserServiceException(Exception):
    """Base exception for all user service errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(UserServiceException):
    """Raised when input validation fails (e.g. invalid format or constraint violation)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(UserServiceException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SourceUnavailableException(UserServiceException):
    """Raised when the source-of-truth store cannot be reached."""

    def __init__(self, operation: str, reason: str | None = None) -> None:
        """Initialize with the failed operation and optional cause.

        Args:
            operation: Store operation that failed (e.g. 'get_user').
            reason: Optional driver error text.
        """
        details: dict[str, Any] = {"operation": operation}
        if reason:
            details["reason"] = reason
        super().__init__(
            "User store is unavailable; try again later.",
            "SERVICE_UNAVAILABLE",
            details,
        )


class CacheDegradedException(UserServiceException):
    """Cache unreachable or returned malformed data. Logged, never propagated."""

    def __init__(self, operation: str, key: str, reason: str | None = None) -> None:
        super().__init__(
            f"Cache {operation} failed for key {key}",
            "CACHE_DEGRADED",
            {"operation": operation, "key": key, "reason": reason},
        )
