"""Domain probe for tenant-scoped background jobs.

Following Domain-Oriented Observability patterns, this probe captures
the lifecycle of jobs run on behalf of one tenant or fanned out across
every active tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantJobProbe(Protocol):
    """Domain probe for tenant-scoped job execution."""

    def job_started(self, job_name: str, tenant_id: int) -> None:
        """Record that a job started for a tenant."""
        ...

    def job_completed(self, job_name: str, tenant_id: int) -> None:
        """Record that a job finished for a tenant."""
        ...

    def job_failed(self, job_name: str, tenant_id: int, error: Exception) -> None:
        """Record that a job failed for a tenant."""
        ...

    def fan_out_completed(
        self, job_name: str, succeeded: int, failed: int
    ) -> None:
        """Record that a job finished running across all active tenants."""
        ...

    def with_context(self, context: ObservationContext) -> TenantJobProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantJobProbe:
    """Default implementation of TenantJobProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantJobProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantJobProbe(logger=self._logger, context=context)

    def job_started(self, job_name: str, tenant_id: int) -> None:
        """Record that a job started for a tenant."""
        self._logger.info(
            "tenant_job_started",
            job_name=job_name,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def job_completed(self, job_name: str, tenant_id: int) -> None:
        """Record that a job finished for a tenant."""
        self._logger.info(
            "tenant_job_completed",
            job_name=job_name,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def job_failed(self, job_name: str, tenant_id: int, error: Exception) -> None:
        """Record that a job failed for a tenant."""
        self._logger.error(
            "tenant_job_failed",
            job_name=job_name,
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def fan_out_completed(
        self, job_name: str, succeeded: int, failed: int
    ) -> None:
        """Record that a job finished running across all active tenants."""
        self._logger.info(
            "tenant_job_fan_out_completed",
            job_name=job_name,
            succeeded=succeeded,
            failed=failed,
            **self._get_context_kwargs(),
        )
