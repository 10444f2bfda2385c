"""HTTP routes for the tenant's user directory."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from identity.application.projections import UserSummary
from identity.application.services import UserService
from identity.dependencies import get_user_service
from identity.ports.exceptions import UserNotFoundError
from identity.presentation.models import RegisterUserRequest, UserResponse

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_user(
    request: RegisterUserRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Register a user in the current tenant.

    Raises:
        PersistenceConflictError: 409 if the username or email is taken
    """
    user = await service.register_user(
        username=request.username,
        email=request.email,
        display_name=request.display_name,
    )
    return UserResponse.from_model(user)


@router.get("")
async def list_users(
    service: Annotated[UserService, Depends(get_user_service)],
    active_only: bool = False,
) -> list[UserSummary]:
    """List the current tenant's users."""
    return await service.list_users(active_only=active_only)


@router.get("/{username}")
async def get_user(
    username: str,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserSummary:
    """Get a user's directory entry."""
    try:
        return await service.get_by_username(username)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {username!r} not found",
        ) from e
