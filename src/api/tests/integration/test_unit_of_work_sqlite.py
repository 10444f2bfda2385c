"""Integration tests for unit of work atomicity on a real tenant database."""

from decimal import Decimal

import pytest

from infrastructure.database.exceptions import PersistenceConflictError
from infrastructure.persistence import UnitOfWorkClosedError, UnitOfWorkState
from products.infrastructure.models import ProductModel
from shared_kernel.middleware.tenant_context import TenantContext, TenantSource

pytestmark = pytest.mark.integration

ACME = TenantContext(tenant_id=1, source=TenantSource.EXPLICIT)


def _product(name: str, stock: int = 0) -> ProductModel:
    return ProductModel(name=name, price=Decimal("10.00"), stock=stock)


async def _count(factory) -> int:
    async with factory.unit_of_work(ACME) as uow:
        return await uow.get_repository(ProductModel).count()


class TestCommit:
    @pytest.mark.asyncio
    async def test_staged_changes_invisible_until_commit(self, products_factory):
        async with products_factory.unit_of_work(ACME) as uow:
            products = uow.get_repository(ProductModel)
            products.add(_product("Lamp"))

            assert await products.count() == 0
            assert await _count(products_factory) == 0

            assert await uow.commit() == 1

        assert await _count(products_factory) == 1

    @pytest.mark.asyncio
    async def test_commit_counts_inserts_updates_and_deletes(self, products_factory):
        async with products_factory.unit_of_work(ACME) as uow:
            uow.get_repository(ProductModel).add_all(
                [_product("Lamp"), _product("Desk"), _product("Chair")]
            )
            assert await uow.commit() == 3

        async with products_factory.unit_of_work(ACME) as uow:
            products = uow.get_repository(ProductModel)
            lamp = await products.first(ProductModel.name == "Lamp")
            desk = await products.first(ProductModel.name == "Desk")
            lamp.stock = 4
            await products.remove(desk)

            assert await uow.commit() == 2

        async with products_factory.unit_of_work(ACME) as uow:
            products = uow.get_repository(ProductModel)
            assert await products.exists(ProductModel.name == "Desk") is False
            lamp = await products.first(ProductModel.name == "Lamp")
            assert lamp.stock == 4

    @pytest.mark.asyncio
    async def test_uncommitted_work_is_discarded_on_dispose(self, products_factory):
        async with products_factory.unit_of_work(ACME) as uow:
            uow.get_repository(ProductModel).add(_product("Ghost"))

        assert uow.state is UnitOfWorkState.DISPOSED
        assert await _count(products_factory) == 0

    @pytest.mark.asyncio
    async def test_removing_staged_entity_unstages_it(self, products_factory):
        async with products_factory.unit_of_work(ACME) as uow:
            products = uow.get_repository(ProductModel)
            lamp = _product("Lamp")
            products.add(lamp)
            await products.remove(lamp)

            assert await uow.commit() == 0


class TestAtomicity:
    @pytest.mark.asyncio
    async def test_failed_commit_persists_nothing(self, products_factory):
        async with products_factory.unit_of_work(ACME) as uow:
            uow.get_repository(ProductModel).add(_product("Lamp"))
            await uow.commit()

        async with products_factory.unit_of_work(ACME) as uow:
            uow.get_repository(ProductModel).add_all(
                [_product("Chair"), _product("Lamp")]
            )
            with pytest.raises(PersistenceConflictError):
                await uow.commit()

            assert uow.state is UnitOfWorkState.ROLLED_BACK
            with pytest.raises(UnitOfWorkClosedError):
                uow.get_repository(ProductModel)

        async with products_factory.unit_of_work(ACME) as uow:
            names = [p.name for p in await uow.get_repository(ProductModel).get_all()]
        assert names == ["Lamp"]

    @pytest.mark.asyncio
    async def test_explicit_rollback_discards_changes(self, products_factory):
        async with products_factory.unit_of_work(ACME) as uow:
            uow.get_repository(ProductModel).add(_product("Lamp"))
            await uow.rollback()

        assert await _count(products_factory) == 0
