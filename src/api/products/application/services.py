"""Application service for the products bounded context.

The service works inside one unit of work, so everything it does is
confined to the tenant that unit of work was opened for. Write methods
commit, which closes the unit of work; use one service per request.
"""

from __future__ import annotations

from decimal import Decimal

from infrastructure.database.models import new_ulid
from infrastructure.persistence import Page, Repository, UnitOfWork
from products.application.projections import ProductStockLevel, ProductSummary
from products.infrastructure.models import ProductModel
from products.ports.exceptions import ProductNotFoundError


class ProductService:
    """Catalog operations for the current tenant."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    @property
    def _products(self) -> Repository[ProductModel]:
        return self._uow.get_repository(ProductModel)

    async def create_product(
        self,
        name: str,
        price: Decimal,
        stock: int = 0,
        description: str | None = None,
    ) -> ProductModel:
        """Add a product to the catalog.

        Raises:
            PersistenceConflictError: If the name is already taken
        """
        product = ProductModel(
            id=new_ulid(),
            name=name,
            description=description,
            price=price,
            stock=stock,
        )
        self._products.add(product)
        await self._uow.commit()
        return product

    async def get_product(self, product_id: str) -> ProductModel:
        """Load a full product.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = await self._products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def get_summary(self, product_id: str) -> ProductSummary:
        """Load a product's catalog summary.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        summary = await self._products.get_by_id_as(ProductSummary, product_id)
        if summary is None:
            raise ProductNotFoundError(product_id)
        return summary

    async def list_summaries(self) -> list[ProductSummary]:
        """List every product's summary, ordered by name."""
        return await self._products.find_as(
            ProductSummary, order_by=[ProductModel.name]
        )

    async def get_summary_page(self, page: int, page_size: int) -> Page[ProductSummary]:
        """One page of product summaries, ordered by name."""
        return await self._products.get_page_as(
            ProductSummary,
            page=page,
            page_size=page_size,
            order_by=[ProductModel.name],
        )

    async def list_in_stock(self) -> list[ProductStockLevel]:
        """Stock levels of products with stock left."""
        return await self._products.find_as(
            ProductStockLevel,
            ProductModel.stock > 0,
            order_by=[ProductModel.name],
        )

    async def find_low_stock(self, threshold: int) -> list[ProductStockLevel]:
        """Stock levels of products below a threshold, lowest first."""
        return await self._products.find_as(
            ProductStockLevel,
            ProductModel.stock < threshold,
            order_by=[ProductModel.stock, ProductModel.name],
        )

    async def update_stock(self, product_id: str, stock: int) -> ProductModel:
        """Set a product's stock level.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = await self.get_product(product_id)
        product.stock = stock
        await self._uow.commit()
        return product

    async def delete_product(self, product_id: str) -> None:
        """Remove a product from the catalog.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = await self.get_product(product_id)
        await self._products.remove(product)
        await self._uow.commit()
