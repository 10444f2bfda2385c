"""HTTP routes for the tenant's product catalog.

Every route runs inside the request's products unit of work, so tenant
resolution and routing failures surface before the handler body runs.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from products.application.services import ProductService
from products.dependencies import get_product_service
from products.ports.exceptions import ProductNotFoundError
from products.presentation.models import (
    CreateProductRequest,
    ProductResponse,
    ProductSummaryPageResponse,
    ProductSummaryResponse,
    StockLevelResponse,
    UpdateStockRequest,
)

router = APIRouter(
    prefix="/products",
    tags=["products"],
)


def _not_found(error: ProductNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product {error.product_id} not found",
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: CreateProductRequest,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductResponse:
    """Create a product in the current tenant's catalog.

    Raises:
        PersistenceConflictError: 409 if the name is already taken
    """
    product = await service.create_product(
        name=request.name,
        description=request.description,
        price=request.price,
        stock=request.stock,
    )
    return ProductResponse.from_model(product)


@router.get("")
async def list_products(
    service: Annotated[ProductService, Depends(get_product_service)],
) -> list[ProductSummaryResponse]:
    """List product summaries."""
    summaries = await service.list_summaries()
    return [ProductSummaryResponse.from_projection(s) for s in summaries]


@router.get("/page")
async def list_products_page(
    service: Annotated[ProductService, Depends(get_product_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> ProductSummaryPageResponse:
    """List one page of product summaries."""
    result = await service.get_summary_page(page=page, page_size=page_size)
    return ProductSummaryPageResponse.from_page(result)


@router.get("/in-stock")
async def list_in_stock(
    service: Annotated[ProductService, Depends(get_product_service)],
) -> list[StockLevelResponse]:
    """List stock levels of products with stock left."""
    levels = await service.list_in_stock()
    return [StockLevelResponse.from_projection(level) for level in levels]


@router.get("/low-stock")
async def list_low_stock(
    service: Annotated[ProductService, Depends(get_product_service)],
    threshold: Annotated[int, Query(ge=1)] = 10,
) -> list[StockLevelResponse]:
    """List stock levels of products below a threshold."""
    levels = await service.find_low_stock(threshold)
    return [StockLevelResponse.from_projection(level) for level in levels]


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductResponse:
    """Get a full product."""
    try:
        product = await service.get_product(product_id)
    except ProductNotFoundError as e:
        raise _not_found(e) from e
    return ProductResponse.from_model(product)


@router.get("/{product_id}/summary")
async def get_product_summary(
    product_id: str,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductSummaryResponse:
    """Get a product's summary without loading the full product."""
    try:
        summary = await service.get_summary(product_id)
    except ProductNotFoundError as e:
        raise _not_found(e) from e
    return ProductSummaryResponse.from_projection(summary)


@router.put("/{product_id}/stock")
async def update_stock(
    product_id: str,
    request: UpdateStockRequest,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductResponse:
    """Set a product's stock level."""
    try:
        product = await service.update_stock(product_id, request.stock)
    except ProductNotFoundError as e:
        raise _not_found(e) from e
    return ProductResponse.from_model(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> None:
    """Delete a product."""
    try:
        await service.delete_product(product_id)
    except ProductNotFoundError as e:
        raise _not_found(e) from e
