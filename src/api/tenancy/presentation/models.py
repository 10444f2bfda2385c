"""Pydantic models for tenant API responses.

Connection coordinates never appear in these models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from shared_kernel.middleware.tenant_context import TenantContext, TenantSource
from tenancy.domain.aggregates import Tenant


class TenantResponse(BaseModel):
    """Response model for a tenant."""

    id: int = Field(..., description="Tenant ID")
    name: str = Field(..., description="Unique tenant name")
    display_name: str = Field(..., description="Name shown to users")
    subdomain: str | None = Field(default=None, description="Tenant subdomain")

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant to API response."""
        return cls(
            id=tenant.id.value,
            name=tenant.name,
            display_name=tenant.label,
            subdomain=tenant.subdomain,
        )


class CurrentTenantResponse(TenantResponse):
    """Response model for the tenant the request resolved to."""

    resolved_from: TenantSource = Field(
        ..., description="Signal the tenant was resolved from"
    )

    @classmethod
    def from_resolution(
        cls, tenant: Tenant, context: TenantContext
    ) -> CurrentTenantResponse:
        """Combine the registry record with how it was resolved."""
        return cls(
            **TenantResponse.from_domain(tenant).model_dump(),
            resolved_from=context.source,
        )
