"""SQLAlchemy implementation of ITenantRegistry.

The registry is shared by every request, so it never holds a session of
its own: each lookup opens a short-lived session from the registry
sessionmaker and closes it before returning.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import timedelta

from sqlalchemy import Select, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.exceptions import PersistenceUnavailableError
from shared_kernel.tenancy import TenantInactiveError, TenantNotFoundError, TenantTarget
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.observability import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)
from tenancy.ports.repositories import ITenantRegistry


def _to_domain(model: TenantModel) -> Tenant:
    return Tenant(
        id=TenantId(value=model.id),
        name=model.name,
        connection_url=model.connection_url,
        is_active=model.is_active,
        display_name=model.display_name,
        subdomain=model.subdomain,
        created_at=model.created_at,
    )


def _routable_target(
    tenant: Tenant | None, tenant_id: int, probe: TenantRegistryProbe
) -> TenantTarget:
    """Turn a registry record into a target, refusing missing or inactive tenants."""
    if tenant is None:
        probe.tenant_not_found(tenant_id)
        raise TenantNotFoundError(tenant_id)
    if not tenant.is_active:
        probe.tenant_inactive(tenant_id)
        raise TenantInactiveError(tenant_id)
    return tenant.to_target()


class TenantRegistry(ITenantRegistry):
    """Reads tenant records from the registry database."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        probe: TenantRegistryProbe | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            session_factory: Sessionmaker bound to the registry database
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._probe = probe or DefaultTenantRegistryProbe()

    async def find_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch a tenant by id, active or not."""
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        models = await self._fetch(stmt)
        if not models:
            return None

        self._probe.tenant_retrieved(tenant_id.value)
        return _to_domain(models[0])

    async def find_by_name(self, name: str) -> Tenant | None:
        """Fetch a tenant by its unique name, active or not."""
        stmt = select(TenantModel).where(TenantModel.name == name)
        models = await self._fetch(stmt)
        if not models:
            self._probe.tenant_name_not_found(name)
            return None

        self._probe.tenant_retrieved(models[0].id)
        return _to_domain(models[0])

    async def list_active(self) -> list[Tenant]:
        """List active tenants ordered by id."""
        stmt = (
            select(TenantModel)
            .where(TenantModel.is_active.is_(True))
            .order_by(TenantModel.id)
        )
        tenants = [_to_domain(model) for model in await self._fetch(stmt)]
        self._probe.active_tenants_listed(len(tenants))
        return tenants

    async def get_target(self, tenant_id: int) -> TenantTarget:
        """Look up the connection target of an active tenant.

        Raises:
            TenantNotFoundError: If the tenant is not registered
            TenantInactiveError: If the tenant is deactivated
            PersistenceUnavailableError: If the registry cannot be reached
        """
        tenant = await self.find_by_id(TenantId(value=tenant_id))
        return _routable_target(tenant, tenant_id, self._probe)

    async def _fetch(self, stmt: Select[tuple[TenantModel]]) -> list[TenantModel]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except (OperationalError, InterfaceError, OSError) as e:
            self._probe.registry_unavailable(e)
            raise PersistenceUnavailableError(
                "Tenant registry is unavailable"
            ) from e


class CachingTenantRegistry(ITenantRegistry):
    """Registry decorator caching tenant records used for routing.

    Only get_target is cached; listing and lookups by name always read
    through. Cached records keep their active flag, so a tenant deactivated
    in the registry is refused once its entry expires. Misses are never
    cached.
    """

    def __init__(
        self,
        registry: ITenantRegistry,
        ttl: timedelta,
        probe: TenantRegistryProbe | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._ttl_seconds = ttl.total_seconds()
        self._probe = probe or DefaultTenantRegistryProbe()
        self._clock = clock
        self._entries: dict[int, tuple[float, Tenant]] = {}

    async def find_by_id(self, tenant_id: TenantId) -> Tenant | None:
        return await self._registry.find_by_id(tenant_id)

    async def find_by_name(self, name: str) -> Tenant | None:
        return await self._registry.find_by_name(name)

    async def list_active(self) -> list[Tenant]:
        return await self._registry.list_active()

    async def get_target(self, tenant_id: int) -> TenantTarget:
        now = self._clock()
        entry = self._entries.get(tenant_id)

        if entry is not None and entry[0] > now:
            self._probe.registry_cache_hit(tenant_id)
            tenant: Tenant | None = entry[1]
        else:
            tenant = await self._registry.find_by_id(TenantId(value=tenant_id))
            if tenant is None:
                self._entries.pop(tenant_id, None)
            else:
                self._entries[tenant_id] = (now + self._ttl_seconds, tenant)

        return _routable_target(tenant, tenant_id, self._probe)

    def invalidate(self, tenant_id: int | None = None) -> None:
        """Drop one cached record, or all of them."""
        if tenant_id is None:
            self._entries.clear()
        else:
            self._entries.pop(tenant_id, None)
