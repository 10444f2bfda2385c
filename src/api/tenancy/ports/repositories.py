"""Repository protocols (ports) for the tenancy bounded context.

The tenant registry is read-only from this service's point of view;
tenants are provisioned and deactivated by administrative tooling.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared_kernel.tenancy import TenantTarget
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId


@runtime_checkable
class ITenantRegistry(Protocol):
    """Read access to the tenant registry.

    Implementations must be safe for concurrent use by many requests; they
    satisfy the shared kernel's TenantLookup port through get_target.
    """

    async def find_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID, active or not.

        Args:
            tenant_id: The tenant identifier

        Returns:
            The Tenant, or None if not registered
        """
        ...

    async def find_by_name(self, name: str) -> Tenant | None:
        """Retrieve a tenant by its unique name, active or not.

        Args:
            name: The tenant name

        Returns:
            The Tenant, or None if not registered
        """
        ...

    async def list_active(self) -> list[Tenant]:
        """List every active tenant, ordered by id."""
        ...

    async def get_target(self, tenant_id: int) -> TenantTarget:
        """Look up the connection target of an active tenant.

        Raises:
            TenantNotFoundError: If the tenant is not registered
            TenantInactiveError: If the tenant is deactivated
        """
        ...
