"""SQLAlchemy ORM models stored in each tenant's database.

Products has its own declarative base so its metadata describes only the
tables this module owns inside a tenant database. Tables are created by
external migration tooling.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from infrastructure.database.models import TimestampMixin, UlidPrimaryKeyMixin


class ProductsBase(DeclarativeBase):
    """Declarative base for tables owned by the products module."""

    type_annotation_map: dict[type, Any] = {}


class ProductModel(ProductsBase, UlidPrimaryKeyMixin, TimestampMixin):
    """ORM model for the products table.

    Product names are unique within one tenant; two tenants may use the
    same name since they never share a database.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ProductModel(id={self.id}, name={self.name}, stock={self.stock})>"
