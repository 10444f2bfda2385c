"""Read projections over users."""

from __future__ import annotations

from pydantic import BaseModel


class UserSummary(BaseModel):
    """Directory entry for a user."""

    id: str
    username: str
    display_name: str | None
    is_active: bool
