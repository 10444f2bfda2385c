"""Database dependency providers.

Provides the registry database sessionmaker and the per-tenant engine cache
as process-wide singletons, plus shutdown cleanup for both.
"""

from __future__ import annotations

import threading

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engine_cache import TenantEngineCache
from infrastructure.database.engines import create_registry_engine
from infrastructure.observability import DefaultEngineProbe
from infrastructure.settings import get_database_settings, get_tenancy_settings

# Module-level probe for observability
_probe = DefaultEngineProbe()

# Module-level instances (created on first use)
_registry_engine: AsyncEngine | None = None
_registry_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_tenant_engine_cache: TenantEngineCache | None = None

# Thread lock for safe initialization
_engine_lock = threading.Lock()


def get_registry_engine() -> AsyncEngine:
    """Get the tenant registry database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.
    Also creates and caches the sessionmaker for efficient session creation.

    Returns:
        Configured async engine for the registry database
    """
    global _registry_engine, _registry_sessionmaker
    if _registry_engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _registry_engine is None:
                settings = get_database_settings()
                _registry_engine = create_registry_engine(settings)
                _registry_sessionmaker = async_sessionmaker(
                    _registry_engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
    return _registry_engine


def get_registry_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker bound to the registry database engine."""
    get_registry_engine()
    assert _registry_sessionmaker is not None
    return _registry_sessionmaker


def get_tenant_engine_cache() -> TenantEngineCache:
    """Get the process-wide per-tenant engine cache (singleton)."""
    global _tenant_engine_cache
    if _tenant_engine_cache is None:
        with _engine_lock:
            if _tenant_engine_cache is None:
                _tenant_engine_cache = TenantEngineCache(
                    settings=get_tenancy_settings(),
                    probe=_probe,
                )
    return _tenant_engine_cache


async def close_database_connections() -> None:
    """Close the registry engine and every cached tenant engine.

    Should be called on application shutdown to properly cleanup connections.
    Also resets the singletons to allow reinitialization.
    """
    global _registry_engine, _registry_sessionmaker, _tenant_engine_cache

    if _tenant_engine_cache is not None:
        await _tenant_engine_cache.dispose_all()
        _tenant_engine_cache = None

    if _registry_engine is not None:
        await _registry_engine.dispose()
        _probe.registry_pool_closed()
        _registry_engine = None
        _registry_sessionmaker = None
