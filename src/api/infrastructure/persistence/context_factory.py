"""Per-module factory for sessions bound to the current tenant's database.

Every bounded module (products, identity, ...) gets one factory instance,
parameterized by its ModuleSchema. Given a resolved tenant, the factory
looks the tenant up, builds the module's coordinates inside that tenant's
database and opens a fresh session there. Sessions are never cached or
reused; only the underlying engines are.

Nothing touches a tenant database until the tenant is resolved, registered
and active.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.exc import ArgumentError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.engine_cache import TenantEngineCache
from infrastructure.database.exceptions import PersistenceUnavailableError
from infrastructure.persistence.observability import (
    DefaultTenantSessionProbe,
    DefaultUnitOfWorkProbe,
    TenantSessionProbe,
    UnitOfWorkProbe,
)
from infrastructure.persistence.repository import RepositoryRegistry
from infrastructure.persistence.unit_of_work import UnitOfWork
from shared_kernel.middleware.tenant_context import TenantContext
from shared_kernel.tenancy import (
    TenantInactiveError,
    TenantLookup,
    TenantNotFoundError,
    TenantRequiredError,
    TenantTarget,
)


@dataclass(frozen=True)
class ModuleSchema:
    """What a module stores inside each tenant database.

    Attributes:
        name: Module name, e.g. "products"
        metadata: The module's own SQLAlchemy metadata
        repositories: Entity types the module's units of work expose
        schema: Database schema holding the module's tables, or None for
            the connection's default schema
    """

    name: str
    metadata: MetaData
    repositories: RepositoryRegistry
    schema: str | None = None


@dataclass(frozen=True)
class SessionCoordinates:
    """Where and how a module's session connects for one tenant."""

    url: str = field(repr=False)
    execution_options: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )


CoordinateBuilder = Callable[[TenantTarget, ModuleSchema], SessionCoordinates]


def module_schema_coordinates(
    target: TenantTarget, module: ModuleSchema
) -> SessionCoordinates:
    """Default coordinates: the tenant's URL, with the module's schema translated in.

    Unqualified tables of the module resolve to its schema through
    SQLAlchemy's schema_translate_map.
    """
    options: dict[str, Any] = {}
    if module.schema is not None:
        options["schema_translate_map"] = {None: module.schema}
    return SessionCoordinates(
        url=target.connection_url,
        execution_options=MappingProxyType(options),
    )


class TenantContextFactory:
    """Opens sessions for one module against the current tenant's database."""

    def __init__(
        self,
        module: ModuleSchema,
        registry: TenantLookup,
        engines: TenantEngineCache,
        coordinate_builder: CoordinateBuilder = module_schema_coordinates,
        probe: TenantSessionProbe | None = None,
        unit_of_work_probe: UnitOfWorkProbe | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            module: The module this factory serves
            registry: Tenant lookup (registry) resolving tenants to targets
            engines: Process-wide tenant engine cache
            coordinate_builder: Maps a tenant target to module coordinates
            probe: Optional domain probe for session observability
            unit_of_work_probe: Optional probe handed to created units of work
        """
        self._module = module
        self._registry = registry
        self._engines = engines
        self._coordinate_builder = coordinate_builder
        self._probe = probe or DefaultTenantSessionProbe()
        self._unit_of_work_probe = unit_of_work_probe or DefaultUnitOfWorkProbe()

    @property
    def module(self) -> ModuleSchema:
        return self._module

    async def create_session(self, tenant: TenantContext | None) -> AsyncSession:
        """Open a new session bound to the tenant's database.

        The session's connection is established before returning, so an
        unreachable tenant database fails here rather than on first query.
        The caller owns the returned session and must close it.

        Args:
            tenant: Resolved tenant, or None if resolution found nothing

        Returns:
            An open session with autoflush disabled

        Raises:
            TenantRequiredError: If tenant is None
            TenantNotFoundError: If the tenant is not registered
            TenantInactiveError: If the tenant is deactivated
            PersistenceUnavailableError: If the tenant database cannot be reached
        """
        module_name = self._module.name
        if tenant is None:
            self._probe.tenant_required(module_name)
            raise TenantRequiredError()

        try:
            target = await self._registry.get_target(tenant.tenant_id)
        except (TenantNotFoundError, TenantInactiveError):
            await self._engines.evict(tenant.tenant_id)
            raise
        coordinates = self._coordinate_builder(target, self._module)
        # Release pools left behind by a rotated registry URL
        await self._engines.evict(target.tenant_id, keep_url=coordinates.url)

        try:
            engine = self._engines.get_engine(target.tenant_id, coordinates.url)
        except ArgumentError as e:
            self._probe.session_open_failed(module_name, tenant.tenant_id, e)
            raise PersistenceUnavailableError(
                f"Tenant {tenant.tenant_id} has invalid connection coordinates"
            ) from e

        session = AsyncSession(bind=engine, expire_on_commit=False, autoflush=False)
        try:
            await session.connection(
                execution_options=dict(coordinates.execution_options) or None
            )
        except (OperationalError, InterfaceError, OSError) as e:
            await session.close()
            self._probe.session_open_failed(module_name, tenant.tenant_id, e)
            raise PersistenceUnavailableError(
                f"Tenant {tenant.tenant_id} database is unavailable"
            ) from e
        except asyncio.CancelledError:
            await session.close()
            raise

        self._probe.session_opened(module_name, tenant.tenant_id)
        return session

    @asynccontextmanager
    async def unit_of_work(self, tenant: TenantContext | None) -> AsyncIterator[UnitOfWork]:
        """Open a unit of work for the tenant and dispose it on exit.

        Usage:
            async with factory.unit_of_work(resolver.resolve()) as uow:
                uow.get_repository(ProductModel).add(product)
                await uow.commit()

        Raises:
            Everything create_session raises, before the body runs
        """
        session = await self.create_session(tenant)
        assert tenant is not None
        uow = UnitOfWork(
            session=session,
            repositories=self._module.repositories,
            tenant=tenant,
            module=self._module.name,
            probe=self._unit_of_work_probe,
        )
        try:
            yield uow
        finally:
            await uow.dispose()
