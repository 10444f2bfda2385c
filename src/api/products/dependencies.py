"""Dependency injection for the products bounded context.

The context factory is a process-wide singleton; the unit of work is
opened per request for the request's tenant and disposed when the
request finishes, whatever the outcome.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from infrastructure.database.dependencies import get_tenant_engine_cache
from infrastructure.persistence import TenantContextFactory, UnitOfWork
from products.application.jobs import LowStockCheck
from products.application.services import ProductService
from products.infrastructure.module import PRODUCTS_MODULE
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.dependencies import (
    get_optional_tenant_context,
    get_tenant_job_runner,
    get_tenant_registry,
)


@lru_cache
def get_products_context_factory() -> TenantContextFactory:
    """Get the products module's tenant context factory (singleton)."""
    return TenantContextFactory(
        module=PRODUCTS_MODULE,
        registry=get_tenant_registry(),
        engines=get_tenant_engine_cache(),
    )


async def get_products_unit_of_work(
    tenant: Annotated[TenantContext | None, Depends(get_optional_tenant_context)],
    factory: Annotated[TenantContextFactory, Depends(get_products_context_factory)],
) -> AsyncIterator[UnitOfWork]:
    """Open a products unit of work for the request's tenant.

    Raises:
        TenantRequiredError: If the request names no tenant
        TenantNotFoundError: If the tenant is not registered
        TenantInactiveError: If the tenant is deactivated
        PersistenceUnavailableError: If the tenant database cannot be reached
    """
    async with factory.unit_of_work(tenant) as uow:
        yield uow


def get_product_service(
    uow: Annotated[UnitOfWork, Depends(get_products_unit_of_work)],
) -> ProductService:
    """Get ProductService bound to the request's unit of work."""
    return ProductService(uow=uow)


@lru_cache
def get_low_stock_check() -> LowStockCheck:
    """Get the low stock background job (singleton)."""
    return LowStockCheck(
        factory=get_products_context_factory(),
        runner=get_tenant_job_runner(),
    )
