"""User API schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.application.dtos.user import UserData


class UserWriteRequest(BaseModel):
    """Request body for creating or replacing a user.

    status is optional; the store applies the default when it is omitted.
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    status: str | None = Field(default=None, max_length=50)

    def to_data(self) -> UserData:
        """Convert to the application write DTO."""
        return UserData(name=self.name, email=str(self.email), status=self.status or None)


class UserCreateRequest(UserWriteRequest):
    """Request body for POST /users."""


class UserUpdateRequest(UserWriteRequest):
    """Request body for PUT /users/{id} (full replacement)."""


class UserResponse(BaseModel):
    """User as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    status: str
