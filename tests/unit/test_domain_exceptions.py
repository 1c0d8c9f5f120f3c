"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    CacheDegradedException,
    ResourceNotFoundException,
    SourceUnavailableException,
    UserServiceException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base UserServiceException uses class name as error_code when not provided."""
    exc = UserServiceException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "UserServiceException"
    assert exc.details == {}


def test_base_exception_custom_error_code_and_details() -> None:
    """UserServiceException accepts custom error_code and details."""
    exc = UserServiceException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.message == "Oops"
    assert exc.error_code == "CUSTOM"
    assert exc.details == {"key": "value"}
    assert str(exc) == "Oops"


def test_to_dict_is_error_body() -> None:
    """to_dict returns the JSON body used by the HTTP handlers."""
    exc = ValidationException("Invalid format", field="email")
    assert exc.to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "Invalid format",
        "details": {"field": "email"},
    }


def test_validation_exception_without_field() -> None:
    """ValidationException with no field has empty details."""
    exc = ValidationException("Invalid")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("user", 99)
    assert "user" in exc.message and "99" in exc.message
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "user", "resource_id": 99}


def test_source_unavailable_exception() -> None:
    """SourceUnavailableException records the operation and optional reason."""
    exc = SourceUnavailableException("get_user", "connection refused")
    assert exc.error_code == "SERVICE_UNAVAILABLE"
    assert exc.details == {"operation": "get_user", "reason": "connection refused"}
    assert SourceUnavailableException("list_users").details == {"operation": "list_users"}


def test_cache_degraded_exception() -> None:
    exc = CacheDegradedException("get", "user:1", "timeout")
    assert exc.message == "Cache get failed for key user:1"
    assert exc.error_code == "CACHE_DEGRADED"
    assert exc.details["reason"] == "timeout"


def test_all_inherit_from_base() -> None:
    """Every domain exception can be caught as UserServiceException."""
    for exc in (
        ValidationException("x"),
        ResourceNotFoundException("user", 1),
        SourceUnavailableException("create_user"),
        CacheDegradedException("set", "users:all"),
    ):
        assert isinstance(exc, UserServiceException)
