"""Domain-Oriented Observability for tenancy infrastructure."""

from tenancy.infrastructure.observability.registry_probe import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)

__all__ = [
    "DefaultTenantRegistryProbe",
    "TenantRegistryProbe",
]
