"""Tenant aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from shared_kernel.tenancy import TenantTarget
from tenancy.domain.value_objects import TenantId


@dataclass(frozen=True)
class Tenant:
    """A registered tenant and the coordinates of its database.

    Tenants are created and deactivated by administrative tooling outside
    this service; here they are read-only. A deactivated tenant keeps its
    record and can never be routed to.
    """

    id: TenantId
    name: str
    connection_url: str = field(repr=False)
    is_active: bool = True
    display_name: str | None = None
    subdomain: str | None = None
    created_at: datetime | None = None

    @property
    def label(self) -> str:
        """Name shown to users: display name when set, otherwise the tenant name."""
        return self.display_name or self.name

    def to_target(self) -> TenantTarget:
        """Connection target for the routing layer."""
        return TenantTarget(tenant_id=self.id.value, connection_url=self.connection_url)
