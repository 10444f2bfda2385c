"""Tenant routing contracts shared between the tenancy context and persistence.

Persistence infrastructure depends on these contracts only, never on the
tenancy bounded context itself.
"""

from shared_kernel.tenancy.exceptions import (
    InvalidTenantIdError,
    TenantAccessError,
    TenantInactiveError,
    TenantNotFoundError,
    TenantRequiredError,
)
from shared_kernel.tenancy.ports import TenantLookup, TenantTarget

__all__ = [
    "InvalidTenantIdError",
    "TenantAccessError",
    "TenantInactiveError",
    "TenantLookup",
    "TenantNotFoundError",
    "TenantRequiredError",
    "TenantTarget",
]
