"""Shared middleware for cross-cutting concerns.

This module contains the tenant identity value object shared across bounded
contexts and the probe used while resolving it.
"""

from shared_kernel.middleware.tenant_context import TenantContext, TenantSource

__all__ = [
    "TenantContext",
    "TenantSource",
]
