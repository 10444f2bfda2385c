"""Persistence layout of the products module inside a tenant database."""

from infrastructure.persistence import ModuleSchema, RepositoryRegistry
from products.infrastructure.models import ProductModel, ProductsBase

PRODUCTS_MODULE = ModuleSchema(
    name="products",
    metadata=ProductsBase.metadata,
    repositories=RepositoryRegistry().register(ProductModel),
)
