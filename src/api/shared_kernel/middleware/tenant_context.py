"""Tenant context value object for resolved tenant identification.

This module contains the pure value object that represents a resolved
tenant identity. It is framework-agnostic and contains no business logic,
making it safe for the shared kernel.

The actual resolution logic (signal precedence, parsing, the explicit
override used by background jobs) lives in the tenancy bounded context.
An unresolved tenant is represented by ``None``, never by a sentinel
TenantContext.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TenantSource(StrEnum):
    """Where a tenant identity was resolved from, in precedence order."""

    EXPLICIT = "explicit"
    CLAIM = "claim"
    HEADER = "header"
    QUERY = "query"


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant identity for the current request or job scope.

    Attributes:
        tenant_id: The tenant's registry identifier.
        source: Which signal the identity was resolved from.
    """

    tenant_id: int
    source: TenantSource

    def __str__(self) -> str:
        return str(self.tenant_id)
