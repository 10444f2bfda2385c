"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to resolving the current tenant from
the explicit override, the identity claim, the X-Tenant-ID header and
the tenantId query parameter.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_resolved(self, tenant_id: int, source: str) -> None:
        """Record that a tenant identity was resolved."""
        ...

    def tenant_unresolved(self, authenticated: bool) -> None:
        """Record that no tenant signal was present."""
        ...

    def untrusted_signal_ignored(self, source: str, raw_value: str) -> None:
        """Record that a header or query value was ignored for an authenticated caller."""
        ...

    def invalid_tenant_id_format(self, raw_value: str, source: str) -> None:
        """Record that a tenant signal did not hold a valid tenant id."""
        ...

    def explicit_tenant_set(self, tenant_id: int) -> None:
        """Record that a scope pinned its tenant explicitly."""
        ...

    def explicit_tenant_cleared(self, tenant_id: int) -> None:
        """Record that an explicit tenant override was cleared."""
        ...

    def tenant_required(self) -> None:
        """Record that tenant-scoped work was requested without a tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_resolved(self, tenant_id: int, source: str) -> None:
        """Record that a tenant identity was resolved."""
        self._logger.debug(
            "tenant_context_resolved",
            tenant_id=tenant_id,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_unresolved(self, authenticated: bool) -> None:
        """Record that no tenant signal was present."""
        self._logger.debug(
            "tenant_context_unresolved",
            authenticated=authenticated,
            **self._get_context_kwargs(),
        )

    def untrusted_signal_ignored(self, source: str, raw_value: str) -> None:
        """Record that a header or query value was ignored for an authenticated caller."""
        self._logger.warning(
            "tenant_context_untrusted_signal_ignored",
            source=source,
            raw_value=raw_value,
            **self._get_context_kwargs(),
        )

    def invalid_tenant_id_format(self, raw_value: str, source: str) -> None:
        """Record that a tenant signal did not hold a valid tenant id."""
        self._logger.warning(
            "tenant_context_invalid_format",
            raw_value=raw_value,
            source=source,
            **self._get_context_kwargs(),
        )

    def explicit_tenant_set(self, tenant_id: int) -> None:
        """Record that a scope pinned its tenant explicitly."""
        self._logger.info(
            "tenant_context_explicit_set",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def explicit_tenant_cleared(self, tenant_id: int) -> None:
        """Record that an explicit tenant override was cleared."""
        self._logger.info(
            "tenant_context_explicit_cleared",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_required(self) -> None:
        """Record that tenant-scoped work was requested without a tenant."""
        self._logger.warning(
            "tenant_context_required",
            message="Tenant-scoped work requested but no tenant was resolved",
            **self._get_context_kwargs(),
        )
