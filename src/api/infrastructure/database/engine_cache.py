"""Process-wide cache of per-tenant async engines.

Each tenant database gets its own engine, and therefore its own connection
pool. Engines are keyed by (tenant_id, url) so a pool never hands a
connection opened for one tenant to a session of another, even if two
registry records point at the same physical database.

Sessions are never cached here; only engines are.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.engines import create_tenant_engine, mask_url
from infrastructure.observability import EngineProbe, DefaultEngineProbe

if TYPE_CHECKING:
    from infrastructure.settings import TenancySettings


class TenantEngineCache:
    """Lazily creates and caches one AsyncEngine per tenant database."""

    def __init__(
        self,
        settings: TenancySettings,
        probe: EngineProbe | None = None,
    ) -> None:
        self._settings = settings
        self._probe = probe or DefaultEngineProbe()
        self._engines: dict[tuple[int, str], AsyncEngine] = {}
        self._urls_by_tenant: dict[int, set[str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._engines)

    def get_engine(self, tenant_id: int, url: str) -> AsyncEngine:
        """Return the engine for a tenant database, creating it on first use.

        Uses double-check locking so concurrent first requests for the same
        tenant create exactly one engine.

        Args:
            tenant_id: Tenant that owns the database
            url: Tenant connection URL from the registry

        Returns:
            The cached engine for (tenant_id, url)

        Raises:
            sqlalchemy.exc.ArgumentError: If the URL cannot be parsed
        """
        key = (tenant_id, url)
        engine = self._engines.get(key)
        if engine is None:
            with self._lock:
                # Double-check after acquiring lock
                engine = self._engines.get(key)
                if engine is None:
                    engine = create_tenant_engine(url, self._settings)
                    self._engines[key] = engine
                    self._urls_by_tenant.setdefault(tenant_id, set()).add(url)
                    self._probe.engine_created(tenant_id=tenant_id, url=mask_url(url))
        return engine

    async def evict(self, tenant_id: int, keep_url: str | None = None) -> int:
        """Dispose a tenant's cached engines.

        Called when a tenant is deactivated or unregistered (no keep_url),
        and when its registry URL changed (keep_url is the current one).

        Args:
            tenant_id: Tenant whose engines are released
            keep_url: URL whose engine stays cached, if any

        Returns:
            Number of engines disposed
        """
        with self._lock:
            urls = self._urls_by_tenant.get(tenant_id)
            if not urls:
                return 0
            stale = [url for url in urls if url != keep_url]
            if not stale:
                return 0
            urls.difference_update(stale)
            if not urls:
                del self._urls_by_tenant[tenant_id]
            engines = [
                ((tenant_id, url), self._engines.pop((tenant_id, url)))
                for url in stale
            ]

        await self._dispose(engines)
        return len(engines)

    async def dispose_all(self) -> None:
        """Dispose every cached engine and empty the cache.

        Called on application shutdown. A failure disposing one engine is
        reported and does not stop the others from being disposed.
        """
        with self._lock:
            engines = list(self._engines.items())
            self._engines.clear()
            self._urls_by_tenant.clear()

        await self._dispose(engines)

    async def _dispose(
        self, engines: list[tuple[tuple[int, str], AsyncEngine]]
    ) -> None:
        for (tenant_id, url), engine in engines:
            try:
                await engine.dispose()
            except Exception as e:
                self._probe.engine_dispose_failed(
                    tenant_id=tenant_id, url=mask_url(url), error=e
                )
            else:
                self._probe.engine_disposed(tenant_id=tenant_id, url=mask_url(url))
