"""Tenant lookup port used by per-module context factories."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class TenantTarget:
    """Physical connection coordinates of an active tenant.

    Only the routing layer sees this; it is never serialized into responses.
    """

    tenant_id: int
    connection_url: str = field(repr=False)


@runtime_checkable
class TenantLookup(Protocol):
    """Resolves a tenant id to the coordinates of its database."""

    async def get_target(self, tenant_id: int) -> TenantTarget:
        """Look up the connection target of an active tenant.

        Args:
            tenant_id: The resolved tenant id

        Returns:
            The tenant's connection target

        Raises:
            TenantNotFoundError: If the tenant is not registered
            TenantInactiveError: If the tenant is deactivated
        """
        ...
