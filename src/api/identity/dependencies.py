"""Dependency injection for the identity bounded context."""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from identity.application.services import UserService
from identity.infrastructure.module import IDENTITY_MODULE
from infrastructure.database.dependencies import get_tenant_engine_cache
from infrastructure.persistence import TenantContextFactory, UnitOfWork
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.dependencies import get_optional_tenant_context, get_tenant_registry


@lru_cache
def get_identity_context_factory() -> TenantContextFactory:
    """Get the identity module's tenant context factory (singleton)."""
    return TenantContextFactory(
        module=IDENTITY_MODULE,
        registry=get_tenant_registry(),
        engines=get_tenant_engine_cache(),
    )


async def get_identity_unit_of_work(
    tenant: Annotated[TenantContext | None, Depends(get_optional_tenant_context)],
    factory: Annotated[TenantContextFactory, Depends(get_identity_context_factory)],
) -> AsyncIterator[UnitOfWork]:
    """Open an identity unit of work for the request's tenant."""
    async with factory.unit_of_work(tenant) as uow:
        yield uow


def get_user_service(
    uow: Annotated[UnitOfWork, Depends(get_identity_unit_of_work)],
) -> UserService:
    """Get UserService bound to the request's unit of work."""
    return UserService(uow=uow)
