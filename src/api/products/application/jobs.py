"""Background jobs for the products bounded context."""

from __future__ import annotations

from infrastructure.persistence import TenantContextFactory
from products.application.observability import DefaultStockCheckProbe, StockCheckProbe
from products.application.projections import ProductStockLevel
from products.application.services import ProductService
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.background import TenantJobReport, TenantJobRunner

DEFAULT_LOW_STOCK_THRESHOLD = 10


class LowStockCheck:
    """Finds products running low on stock, per tenant or across all of them.

    Every tenant is checked in its own tenant scope and unit of work, so
    a tenant whose database is down fails alone.
    """

    job_name = "products_low_stock_check"

    def __init__(
        self,
        factory: TenantContextFactory,
        runner: TenantJobRunner,
        threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        probe: StockCheckProbe | None = None,
    ) -> None:
        self._factory = factory
        self._runner = runner
        self._threshold = threshold
        self._probe = probe or DefaultStockCheckProbe()

    async def check_tenant(self, tenant: TenantContext) -> list[ProductStockLevel]:
        """Low stock products of one tenant, using the caller's tenant scope."""
        async with self._factory.unit_of_work(tenant) as uow:
            levels = await ProductService(uow).find_low_stock(self._threshold)

        if levels:
            self._probe.low_stock_detected(
                tenant.tenant_id, len(levels), self._threshold
            )
        return levels

    async def run_for_tenant(self, tenant_id: int) -> list[ProductStockLevel]:
        """Check one tenant in a fresh explicit tenant scope."""
        return await self._runner.run(tenant_id, self.check_tenant, self.job_name)

    async def run_for_active_tenants(self) -> TenantJobReport[list[ProductStockLevel]]:
        """Check every active tenant."""
        return await self._runner.run_for_active_tenants(
            self.check_tenant, self.job_name
        )
