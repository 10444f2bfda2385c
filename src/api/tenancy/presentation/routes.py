"""HTTP routes for tenant discovery."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.services import TenantDirectoryService
from tenancy.dependencies import get_tenant_context, get_tenant_directory_service
from tenancy.presentation.models import CurrentTenantResponse, TenantResponse

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


@router.get("")
async def list_tenants(
    service: Annotated[TenantDirectoryService, Depends(get_tenant_directory_service)],
) -> list[TenantResponse]:
    """List active tenants."""
    tenants = await service.list_active()
    return [TenantResponse.from_domain(tenant) for tenant in tenants]


@router.get("/current")
async def get_current_tenant(
    tenant: Annotated[TenantContext, Depends(get_tenant_context)],
    service: Annotated[TenantDirectoryService, Depends(get_tenant_directory_service)],
) -> CurrentTenantResponse:
    """Return the tenant this request resolves to.

    Raises:
        TenantRequiredError: 403 if the request names no tenant
        TenantNotFoundError: 403 if the tenant is not registered
        TenantInactiveError: 403 if the tenant is deactivated
    """
    record = await service.get_current(tenant)
    return CurrentTenantResponse.from_resolution(record, tenant)
