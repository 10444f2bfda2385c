"""Domain-Oriented Observability for the tenancy application layer."""

from tenancy.application.observability.job_probe import (
    DefaultTenantJobProbe,
    TenantJobProbe,
)

__all__ = [
    "DefaultTenantJobProbe",
    "TenantJobProbe",
]
