"""Pydantic models for user API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from identity.infrastructure.models import UserModel


class RegisterUserRequest(BaseModel):
    """Request model for registering a user."""

    username: str = Field(..., description="Username", min_length=1, max_length=100)
    email: str = Field(
        ...,
        description="Email address",
        min_length=3,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+$",
    )
    display_name: str | None = Field(default=None, max_length=255)


class UserResponse(BaseModel):
    """Response model for a registered user."""

    id: str = Field(..., description="User ID (ULID format)")
    username: str
    email: str
    display_name: str | None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_model(cls, user: UserModel) -> UserResponse:
        """Convert a user entity to API response."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            is_active=user.is_active,
            created_at=user.created_at,
        )
