"""Application service exposing tenant information to API callers."""

from __future__ import annotations

from shared_kernel.middleware.tenant_context import TenantContext
from shared_kernel.tenancy import TenantInactiveError, TenantNotFoundError
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.ports.repositories import ITenantRegistry


class TenantDirectoryService:
    """Read-only view of the tenant registry for API callers."""

    def __init__(self, registry: ITenantRegistry) -> None:
        self._registry = registry

    async def list_active(self) -> list[Tenant]:
        """List tenants that can currently be routed to."""
        return await self._registry.list_active()

    async def get_current(self, tenant: TenantContext) -> Tenant:
        """Load the registry record of the request's resolved tenant.

        Raises:
            TenantNotFoundError: If the tenant is not registered
            TenantInactiveError: If the tenant is deactivated
        """
        record = await self._registry.find_by_id(TenantId(value=tenant.tenant_id))
        if record is None:
            raise TenantNotFoundError(tenant.tenant_id)
        if not record.is_active:
            raise TenantInactiveError(tenant.tenant_id)
        return record
