"""SQLAlchemy declarative base for the registry database and shared mixins.

Tenant-owned modules declare their own bases so their metadata never mixes
with the registry's tables; they share the mixins defined here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID


def _utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    Ensures proper INSERT-time evaluation.
    """
    return datetime.now(timezone.utc)


def new_ulid() -> str:
    """Generate a ULID in its 26-character string form."""
    return str(ULID())


class Base(DeclarativeBase):
    """Base class for ORM models stored in the tenant registry database."""

    type_annotation_map: dict[type, Any] = {}


class UlidPrimaryKeyMixin:
    """Mixin providing a ULID string primary key.

    Callers may assign the id up front; otherwise one is generated at INSERT time.
    """

    id: Mapped[str] = mapped_column(
        String(26),
        primary_key=True,
        default=new_ulid,
    )


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns.

    Automatically sets created_at on insert and updates updated_at on modification.
    Uses timezone-aware UTC timestamps with Python-side default generation.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        onupdate=_utc_now,  # Evaluated at UPDATE time
        nullable=False,
    )
