"""Domain probes for tenant-bound sessions and units of work.

Following Domain-Oriented Observability patterns, these probes capture
session routing and transaction outcomes without exposing connection
coordinates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantSessionProbe(Protocol):
    """Domain probe for per-module tenant session creation."""

    def tenant_required(self, module: str) -> None:
        """Record that a session was requested with no resolved tenant."""
        ...

    def session_opened(self, module: str, tenant_id: int) -> None:
        """Record that a session was opened against a tenant database."""
        ...

    def session_open_failed(
        self, module: str, tenant_id: int, error: Exception
    ) -> None:
        """Record that a tenant database could not be reached."""
        ...

    def with_context(self, context: ObservationContext) -> TenantSessionProbe:
        """Create a new probe with observation context bound."""
        ...


class UnitOfWorkProbe(Protocol):
    """Domain probe for unit of work transaction outcomes."""

    def changes_committed(self, module: str, tenant_id: int, affected: int) -> None:
        """Record that a unit of work committed."""
        ...

    def commit_conflicted(self, module: str, tenant_id: int, error: Exception) -> None:
        """Record that a commit violated a constraint and was rolled back."""
        ...

    def commit_unavailable(
        self, module: str, tenant_id: int, error: Exception
    ) -> None:
        """Record that a commit lost its connection and was rolled back."""
        ...

    def commit_cancelled(self, module: str, tenant_id: int) -> None:
        """Record that a commit was cancelled and rolled back."""
        ...

    def rolled_back(self, module: str, tenant_id: int, reason: str) -> None:
        """Record that a unit of work rolled back."""
        ...

    def rollback_failed(self, module: str, tenant_id: int, error: Exception) -> None:
        """Record that rolling back a unit of work failed."""
        ...

    def release_failed(self, module: str, tenant_id: int, error: Exception) -> None:
        """Record that releasing a unit of work's session failed."""
        ...

    def with_context(self, context: ObservationContext) -> UnitOfWorkProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantSessionProbe:
    """Default implementation of TenantSessionProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantSessionProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantSessionProbe(logger=self._logger, context=context)

    def tenant_required(self, module: str) -> None:
        """Record that a session was requested with no resolved tenant."""
        self._logger.warning(
            "tenant_session_tenant_required",
            module=module,
            **self._get_context_kwargs(),
        )

    def session_opened(self, module: str, tenant_id: int) -> None:
        """Record that a session was opened against a tenant database."""
        self._logger.debug(
            "tenant_session_opened",
            module=module,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def session_open_failed(
        self, module: str, tenant_id: int, error: Exception
    ) -> None:
        """Record that a tenant database could not be reached."""
        self._logger.error(
            "tenant_session_open_failed",
            module=module,
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )


class DefaultUnitOfWorkProbe:
    """Default implementation of UnitOfWorkProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultUnitOfWorkProbe:
        """Create a new probe with observation context bound."""
        return DefaultUnitOfWorkProbe(logger=self._logger, context=context)

    def changes_committed(self, module: str, tenant_id: int, affected: int) -> None:
        """Record that a unit of work committed."""
        self._logger.info(
            "unit_of_work_committed",
            module=module,
            tenant_id=tenant_id,
            affected=affected,
            **self._get_context_kwargs(),
        )

    def commit_conflicted(self, module: str, tenant_id: int, error: Exception) -> None:
        """Record that a commit violated a constraint and was rolled back."""
        self._logger.warning(
            "unit_of_work_commit_conflicted",
            module=module,
            tenant_id=tenant_id,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def commit_unavailable(
        self, module: str, tenant_id: int, error: Exception
    ) -> None:
        """Record that a commit lost its connection and was rolled back."""
        self._logger.error(
            "unit_of_work_commit_unavailable",
            module=module,
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def commit_cancelled(self, module: str, tenant_id: int) -> None:
        """Record that a commit was cancelled and rolled back."""
        self._logger.warning(
            "unit_of_work_commit_cancelled",
            module=module,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def rolled_back(self, module: str, tenant_id: int, reason: str) -> None:
        """Record that a unit of work rolled back."""
        self._logger.info(
            "unit_of_work_rolled_back",
            module=module,
            tenant_id=tenant_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def rollback_failed(self, module: str, tenant_id: int, error: Exception) -> None:
        """Record that rolling back a unit of work failed."""
        self._logger.error(
            "unit_of_work_rollback_failed",
            module=module,
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def release_failed(self, module: str, tenant_id: int, error: Exception) -> None:
        """Record that releasing a unit of work's session failed."""
        self._logger.error(
            "unit_of_work_release_failed",
            module=module,
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
