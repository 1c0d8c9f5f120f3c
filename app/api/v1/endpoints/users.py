"""User API: thin routes delegating to the user store (IUserStore)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.v1.dependencies import get_user_store
from app.application.interfaces.repositories import IUserStore
from app.domain.entities.user import User
from app.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest

router = APIRouter()

UserStore = Annotated[IUserStore, Depends(get_user_store)]


def _to_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


@router.get("", response_model=list[UserResponse])
async def list_users(store: UserStore) -> list[UserResponse]:
    """List all users."""
    users = await store.list_users()
    return [_to_response(u) for u in users]


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(body: UserCreateRequest, store: UserStore) -> UserResponse:
    """Create a user; the store assigns the id and default status."""
    user = await store.create_user(body.to_data())
    return _to_response(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, store: UserStore) -> UserResponse:
    """Get user by id (404 when absent)."""
    user = await store.get_user(user_id)
    return _to_response(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int, body: UserUpdateRequest, store: UserStore
) -> UserResponse:
    """Replace a user's name, email and status (404 when absent)."""
    user = await store.update_user(user_id, body.to_data())
    return _to_response(user)


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: int, store: UserStore) -> Response:
    """Delete a user (404 when absent)."""
    await store.delete_user(user_id)
    return Response(status_code=204)
