"""SQLAlchemy ORM models for the identity module's tables in a tenant database."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from infrastructure.database.models import TimestampMixin, UlidPrimaryKeyMixin


class IdentityBase(DeclarativeBase):
    """Declarative base for tables owned by the identity module."""

    type_annotation_map: dict[type, Any] = {}


class UserModel(IdentityBase, UlidPrimaryKeyMixin, TimestampMixin):
    """ORM model for the users table.

    Usernames and emails are unique within one tenant.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, username={self.username})>"
