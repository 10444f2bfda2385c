"""Exceptions raised while resolving or routing to a tenant.

All of these are raised before any tenant database I/O happens.
"""


class TenantAccessError(Exception):
    """Base exception for requests that cannot be routed to a tenant."""

    pass


class TenantRequiredError(TenantAccessError):
    """Raised when tenant-scoped work is attempted with no resolved tenant."""

    def __init__(self, message: str = "No tenant could be resolved for this request"):
        super().__init__(message)


class TenantNotFoundError(TenantAccessError):
    """Raised when a resolved tenant id has no registry record."""

    def __init__(self, tenant_id: int):
        super().__init__(f"Tenant {tenant_id} is not registered")
        self.tenant_id = tenant_id


class TenantInactiveError(TenantAccessError):
    """Raised when a resolved tenant has been deactivated."""

    def __init__(self, tenant_id: int):
        super().__init__(f"Tenant {tenant_id} is not active")
        self.tenant_id = tenant_id


class InvalidTenantIdError(ValueError):
    """Raised when a tenant signal does not hold a positive integer id."""

    def __init__(self, raw_value: str, source: str):
        super().__init__(f"Invalid tenant id from {source}: {raw_value!r}")
        self.raw_value = raw_value
        self.source = source
