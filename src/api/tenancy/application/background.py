"""Tenant-scoped execution for work that runs outside a request.

Background jobs have no request signals, so each run gets a fresh resolver
scope pinned to its tenant with the explicit override. The override is
cleared when the scope ends, whether the job succeeded or not.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from shared_kernel.middleware.observability import TenantContextProbe
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.observability import DefaultTenantJobProbe, TenantJobProbe
from tenancy.application.resolver import TenantResolver
from tenancy.ports.repositories import ITenantRegistry

T = TypeVar("T")

TenantJob = Callable[[TenantContext], Awaitable[T]]


@asynccontextmanager
async def tenant_scope(
    tenant_id: int,
    probe: TenantContextProbe | None = None,
) -> AsyncIterator[TenantResolver]:
    """Open a resolver scope pinned to one tenant.

    Usage:
        async with tenant_scope(7) as resolver:
            async with factory.unit_of_work(resolver.resolve()) as uow:
                ...
    """
    resolver = TenantResolver(probe=probe)
    resolver.set_explicit(tenant_id)
    try:
        yield resolver
    finally:
        resolver.clear_explicit()


@dataclass
class TenantJobReport(Generic[T]):
    """Per-tenant outcome of a job run across all active tenants."""

    results: dict[int, T] = field(default_factory=dict)
    failures: dict[int, Exception] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)


class TenantJobRunner:
    """Runs jobs on behalf of tenants, each in its own tenant scope."""

    def __init__(
        self,
        registry: ITenantRegistry,
        probe: TenantJobProbe | None = None,
        resolver_probe: TenantContextProbe | None = None,
        max_concurrency: int = 4,
    ) -> None:
        """Initialize the runner.

        Args:
            registry: Tenant registry used to enumerate active tenants
            probe: Optional domain probe for job observability
            resolver_probe: Optional probe handed to each scope's resolver
            max_concurrency: Tenants processed at once by run_for_active_tenants
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._registry = registry
        self._probe = probe or DefaultTenantJobProbe()
        self._resolver_probe = resolver_probe
        self._max_concurrency = max_concurrency

    async def run(
        self,
        tenant_id: int,
        job: TenantJob[T],
        job_name: str | None = None,
    ) -> T:
        """Run a job for one tenant.

        Args:
            tenant_id: Tenant to run the job for
            job: Coroutine function receiving the scope's tenant context
            job_name: Name used in logs (defaults to the job's __name__)

        Returns:
            Whatever the job returns

        Raises:
            Exception: Whatever the job raises, after it has been recorded
        """
        name = job_name or getattr(job, "__name__", type(job).__name__)

        async with tenant_scope(tenant_id, self._resolver_probe) as resolver:
            tenant = resolver.require()
            self._probe.job_started(name, tenant.tenant_id)
            try:
                result = await job(tenant)
            except Exception as e:
                self._probe.job_failed(name, tenant.tenant_id, e)
                raise
            self._probe.job_completed(name, tenant.tenant_id)
            return result

    async def run_for_active_tenants(
        self,
        job: TenantJob[T],
        job_name: str | None = None,
    ) -> TenantJobReport[T]:
        """Run a job for every active tenant.

        Each tenant runs in its own scope. A failing tenant is recorded in
        the report and does not stop the others.

        Returns:
            Results and failures keyed by tenant id
        """
        name = job_name or getattr(job, "__name__", type(job).__name__)
        tenants = await self._registry.list_active()
        report: TenantJobReport[T] = TenantJobReport()
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run_one(tenant_id: int) -> None:
            async with semaphore:
                try:
                    report.results[tenant_id] = await self.run(tenant_id, job, name)
                except Exception as e:
                    report.failures[tenant_id] = e

        await asyncio.gather(*(run_one(tenant.id.value) for tenant in tenants))

        self._probe.fan_out_completed(name, report.succeeded, report.failed)
        return report
