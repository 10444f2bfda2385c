"""Unit tests for the per-module tenant context factory."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import ArgumentError, OperationalError

from infrastructure.database.engine_cache import TenantEngineCache
from infrastructure.database.exceptions import PersistenceUnavailableError
from infrastructure.persistence import (
    ModuleSchema,
    SessionCoordinates,
    TenantContextFactory,
    UnitOfWorkState,
    module_schema_coordinates,
)
from shared_kernel.tenancy import (
    TenantInactiveError,
    TenantNotFoundError,
    TenantRequiredError,
    TenantTarget,
)

SESSION_CLASS = "infrastructure.persistence.context_factory.AsyncSession"


@pytest.fixture
def mock_engines() -> MagicMock:
    engines = MagicMock(spec=TenantEngineCache)
    engines.get_engine.return_value = MagicMock(name="engine")
    engines.evict = AsyncMock(return_value=0)
    return engines


@pytest.fixture
def factory(
    products_module, mock_lookup, mock_engines, mock_session_probe, mock_uow_probe
) -> TenantContextFactory:
    return TenantContextFactory(
        module=products_module,
        registry=mock_lookup,
        engines=mock_engines,
        probe=mock_session_probe,
        unit_of_work_probe=mock_uow_probe,
    )


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_no_tenant_raises_before_any_lookup(
        self, factory, mock_lookup, mock_engines, mock_session_probe
    ):
        with pytest.raises(TenantRequiredError):
            await factory.create_session(None)

        mock_lookup.get_target.assert_not_awaited()
        mock_engines.get_engine.assert_not_called()
        mock_session_probe.tenant_required.assert_called_once_with("products")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [TenantNotFoundError(1), TenantInactiveError(1)])
    async def test_registry_refusal_opens_nothing(
        self, factory, mock_lookup, mock_engines, tenant_one, error
    ):
        mock_lookup.get_target.side_effect = error

        with pytest.raises(type(error)):
            await factory.create_session(tenant_one)

        mock_engines.get_engine.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [TenantNotFoundError(1), TenantInactiveError(1)])
    async def test_registry_refusal_releases_cached_engines(
        self, factory, mock_lookup, mock_engines, tenant_one, error
    ):
        mock_lookup.get_target.side_effect = error

        with pytest.raises(type(error)):
            await factory.create_session(tenant_one)

        mock_engines.evict.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_engines_for_stale_urls_are_released(
        self, factory, mock_engines, mock_session, tenant_one
    ):
        with patch(SESSION_CLASS, return_value=mock_session):
            await factory.create_session(tenant_one)

        mock_engines.evict.assert_awaited_once_with(
            1, keep_url="sqlite+aiosqlite:///tenant_1.db"
        )

    @pytest.mark.asyncio
    async def test_opens_session_on_tenant_engine(
        self, factory, mock_engines, mock_session, tenant_one, mock_session_probe
    ):
        with patch(SESSION_CLASS, return_value=mock_session) as session_class:
            session = await factory.create_session(tenant_one)

        assert session is mock_session
        mock_engines.get_engine.assert_called_once_with(
            1, "sqlite+aiosqlite:///tenant_1.db"
        )
        session_class.assert_called_once_with(
            bind=mock_engines.get_engine.return_value,
            expire_on_commit=False,
            autoflush=False,
        )
        mock_session.connection.assert_awaited_once_with(execution_options=None)
        mock_session_probe.session_opened.assert_called_once_with("products", 1)

    @pytest.mark.asyncio
    async def test_every_call_opens_a_new_session(self, factory, tenant_one):
        with patch(SESSION_CLASS, side_effect=lambda **kw: MagicMock(
            connection=AsyncMock(), close=AsyncMock()
        )):
            first = await factory.create_session(tenant_one)
            second = await factory.create_session(tenant_one)

        assert first is not second

    @pytest.mark.asyncio
    async def test_unreachable_database_maps_to_unavailable(
        self, factory, mock_session, tenant_one, mock_session_probe
    ):
        mock_session.connection.side_effect = OperationalError(
            "connect", {}, Exception("connection refused")
        )

        with patch(SESSION_CLASS, return_value=mock_session):
            with pytest.raises(PersistenceUnavailableError):
                await factory.create_session(tenant_one)

        mock_session.close.assert_awaited_once()
        mock_session_probe.session_open_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_bad_url_maps_to_unavailable(
        self, factory, mock_engines, tenant_one
    ):
        mock_engines.get_engine.side_effect = ArgumentError("bad url")

        with pytest.raises(PersistenceUnavailableError):
            await factory.create_session(tenant_one)

    @pytest.mark.asyncio
    async def test_cancelled_open_closes_session(
        self, factory, mock_session, tenant_one
    ):
        mock_session.connection.side_effect = asyncio.CancelledError()

        with patch(SESSION_CLASS, return_value=mock_session):
            with pytest.raises(asyncio.CancelledError):
                await factory.create_session(tenant_one)

        mock_session.close.assert_awaited_once()


class TestUnitOfWorkScope:
    @pytest.mark.asyncio
    async def test_unit_of_work_is_disposed_on_exit(
        self, factory, mock_session, tenant_one
    ):
        with patch(SESSION_CLASS, return_value=mock_session):
            async with factory.unit_of_work(tenant_one) as uow:
                assert uow.tenant is tenant_one

        assert uow.state is UnitOfWorkState.DISPOSED
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unit_of_work_is_disposed_on_error(
        self, factory, mock_session, tenant_one
    ):
        with patch(SESSION_CLASS, return_value=mock_session):
            with pytest.raises(RuntimeError):
                async with factory.unit_of_work(tenant_one) as uow:
                    raise RuntimeError("handler failed")

        assert uow.state is UnitOfWorkState.DISPOSED
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_tenant_fails_before_body(self, factory):
        body_ran = False

        with pytest.raises(TenantRequiredError):
            async with factory.unit_of_work(None):
                body_ran = True

        assert body_ran is False


class TestCoordinates:
    def test_default_schema_has_no_translation(self, products_module):
        target = TenantTarget(tenant_id=1, connection_url="sqlite+aiosqlite:///t.db")

        coordinates = module_schema_coordinates(target, products_module)

        assert coordinates.url == "sqlite+aiosqlite:///t.db"
        assert dict(coordinates.execution_options) == {}

    def test_module_schema_is_translated(self, products_module):
        module = ModuleSchema(
            name=products_module.name,
            metadata=products_module.metadata,
            repositories=products_module.repositories,
            schema="catalog",
        )
        target = TenantTarget(tenant_id=1, connection_url="postgresql+asyncpg://db/t1")

        coordinates = module_schema_coordinates(target, module)

        assert coordinates.execution_options["schema_translate_map"] == {
            None: "catalog"
        }

    @pytest.mark.asyncio
    async def test_custom_coordinates_reach_the_session(
        self, products_module, mock_lookup, mock_engines, mock_session, tenant_one
    ):
        def coordinates(target, module):
            return SessionCoordinates(
                url=target.connection_url.replace("tenant_", "replica_"),
                execution_options={"isolation_level": "SERIALIZABLE"},
            )

        factory = TenantContextFactory(
            module=products_module,
            registry=mock_lookup,
            engines=mock_engines,
            coordinate_builder=coordinates,
        )

        with patch(SESSION_CLASS, return_value=mock_session):
            await factory.create_session(tenant_one)

        mock_engines.get_engine.assert_called_once_with(
            1, "sqlite+aiosqlite:///replica_1.db"
        )
        mock_session.connection.assert_awaited_once_with(
            execution_options={"isolation_level": "SERIALIZABLE"}
        )
