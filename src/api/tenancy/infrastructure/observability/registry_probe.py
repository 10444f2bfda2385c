"""Domain probe for tenant registry lookups.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to reading the tenant registry.
Connection URLs are never passed to this probe.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRegistryProbe(Protocol):
    """Domain probe for tenant registry operations."""

    def tenant_retrieved(self, tenant_id: int) -> None:
        """Record that a tenant record was retrieved."""
        ...

    def tenant_not_found(self, tenant_id: int) -> None:
        """Record that a tenant id has no registry record."""
        ...

    def tenant_name_not_found(self, name: str) -> None:
        """Record that a tenant name has no registry record."""
        ...

    def tenant_inactive(self, tenant_id: int) -> None:
        """Record that routing to a deactivated tenant was refused."""
        ...

    def active_tenants_listed(self, count: int) -> None:
        """Record that the active tenants were listed."""
        ...

    def registry_cache_hit(self, tenant_id: int) -> None:
        """Record that a tenant record was served from the registry cache."""
        ...

    def registry_unavailable(self, error: Exception) -> None:
        """Record that the registry database could not be reached."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRegistryProbe:
    """Default implementation of TenantRegistryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRegistryProbe(logger=self._logger, context=context)

    def tenant_retrieved(self, tenant_id: int) -> None:
        """Record that a tenant record was retrieved."""
        self._logger.debug(
            "tenant_registry_tenant_retrieved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: int) -> None:
        """Record that a tenant id has no registry record."""
        self._logger.warning(
            "tenant_registry_tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_name_not_found(self, name: str) -> None:
        """Record that a tenant name has no registry record."""
        self._logger.debug(
            "tenant_registry_name_not_found",
            name=name,
            **self._get_context_kwargs(),
        )

    def tenant_inactive(self, tenant_id: int) -> None:
        """Record that routing to a deactivated tenant was refused."""
        self._logger.warning(
            "tenant_registry_tenant_inactive",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def active_tenants_listed(self, count: int) -> None:
        """Record that the active tenants were listed."""
        self._logger.debug(
            "tenant_registry_active_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def registry_cache_hit(self, tenant_id: int) -> None:
        """Record that a tenant record was served from the registry cache."""
        self._logger.debug(
            "tenant_registry_cache_hit",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def registry_unavailable(self, error: Exception) -> None:
        """Record that the registry database could not be reached."""
        self._logger.error(
            "tenant_registry_unavailable",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
