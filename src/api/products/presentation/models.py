"""Pydantic models for product API requests and responses."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from infrastructure.persistence import Page
from products.application.projections import ProductStockLevel, ProductSummary
from products.infrastructure.models import ProductModel


class CreateProductRequest(BaseModel):
    """Request model for creating a product."""

    name: str = Field(..., description="Product name", min_length=1, max_length=200)
    description: str | None = Field(default=None, description="Product description")
    price: Decimal = Field(..., description="Unit price", ge=0, decimal_places=2)
    stock: int = Field(default=0, description="Units in stock", ge=0)


class UpdateStockRequest(BaseModel):
    """Request model for setting a product's stock level."""

    stock: int = Field(..., description="Units in stock", ge=0)


class ProductResponse(BaseModel):
    """Response model for a full product."""

    id: str = Field(..., description="Product ID (ULID format)")
    name: str
    description: str | None
    price: Decimal
    stock: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, product: ProductModel) -> ProductResponse:
        """Convert a product entity to API response."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductSummaryResponse(BaseModel):
    """Response model for a product summary."""

    id: str
    name: str
    price: Decimal

    @classmethod
    def from_projection(cls, summary: ProductSummary) -> ProductSummaryResponse:
        return cls(id=summary.id, name=summary.name, price=summary.price)


class StockLevelResponse(BaseModel):
    """Response model for a product stock level."""

    id: str
    name: str
    stock: int

    @classmethod
    def from_projection(cls, level: ProductStockLevel) -> StockLevelResponse:
        return cls(id=level.id, name=level.name, stock=level.stock)


class ProductSummaryPageResponse(BaseModel):
    """Response model for one page of product summaries."""

    items: list[ProductSummaryResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[ProductSummary]) -> ProductSummaryPageResponse:
        return cls(
            items=[ProductSummaryResponse.from_projection(s) for s in page.items],
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )
