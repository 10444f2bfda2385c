"""Integration tests for tenant-scoped background jobs."""

from decimal import Decimal

import pytest

from infrastructure.database.exceptions import PersistenceUnavailableError
from products.application.jobs import LowStockCheck
from products.application.services import ProductService
from shared_kernel.middleware.tenant_context import TenantContext, TenantSource
from tenancy.application.background import TenantJobRunner, tenant_scope

pytestmark = pytest.mark.integration


@pytest.fixture
def runner(tenant_registry) -> TenantJobRunner:
    return TenantJobRunner(registry=tenant_registry)


@pytest.fixture
def low_stock_check(products_factory, runner) -> LowStockCheck:
    return LowStockCheck(factory=products_factory, runner=runner, threshold=5)


async def _stock(factory, tenant_id: int, **levels: int) -> None:
    tenant = TenantContext(tenant_id=tenant_id, source=TenantSource.EXPLICIT)
    for name, stock in levels.items():
        async with factory.unit_of_work(tenant) as uow:
            await ProductService(uow).create_product(name, Decimal("1.00"), stock)


class TestLowStockCheck:
    @pytest.mark.asyncio
    async def test_single_tenant(self, products_factory, low_stock_check):
        await _stock(products_factory, 1, anvil=2, bolt=50)

        levels = await low_stock_check.run_for_tenant(1)

        assert [level.name for level in levels] == ["anvil"]

    @pytest.mark.asyncio
    async def test_all_active_tenants_with_one_failing(
        self, products_factory, low_stock_check
    ):
        await _stock(products_factory, 1, anvil=2)
        await _stock(products_factory, 2, gizmo=1, widget=3, sprocket=40)

        report = await low_stock_check.run_for_active_tenants()

        assert sorted(report.results) == [1, 2]
        assert [level.name for level in report.results[2]] == ["gizmo", "widget"]
        assert list(report.failures) == [4]
        assert isinstance(report.failures[4], PersistenceUnavailableError)


class TestExplicitScope:
    @pytest.mark.asyncio
    async def test_scope_routes_unit_of_work(self, products_factory):
        await _stock(products_factory, 2, gizmo=1)

        async with tenant_scope(2) as resolver:
            async with products_factory.unit_of_work(resolver.resolve()) as uow:
                names = [s.name for s in await ProductService(uow).list_summaries()]

        assert names == ["gizmo"]
