"""Integration test fixtures backed by file-based SQLite databases.

Every test gets a fresh registry database plus one database per tenant,
created under pytest's tmp_path and thrown away afterwards:

    1 acme     active
    2 globex   active
    3 initech  deactivated
    4 umbrella active, but its database cannot be opened
"""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from identity.infrastructure.models import IdentityBase
from identity.infrastructure.module import IDENTITY_MODULE
from infrastructure.database.engine_cache import TenantEngineCache
from infrastructure.database.models import Base
from infrastructure.persistence import TenantContextFactory
from infrastructure.settings import TenancySettings
from products.infrastructure.models import ProductsBase
from products.infrastructure.module import PRODUCTS_MODULE
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.tenant_registry import TenantRegistry


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (uses file-backed SQLite tenant databases)",
    )


def _sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def _create_tenant_schema(url: str) -> None:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(ProductsBase.metadata.create_all)
        await conn.run_sync(IdentityBase.metadata.create_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def registry_sessionmaker(
    tmp_path: Path,
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Registry database holding the four test tenants."""
    engine = create_async_engine(_sqlite_url(tmp_path / "registry.db"))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    rows = [
        ("acme", True, _sqlite_url(tmp_path / "acme.db")),
        ("globex", True, _sqlite_url(tmp_path / "globex.db")),
        ("initech", False, _sqlite_url(tmp_path / "initech.db")),
        ("umbrella", True, _sqlite_url(tmp_path / "missing" / "umbrella.db")),
    ]
    for _, _, url in rows[:3]:
        await _create_tenant_schema(url)

    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
    async with sessionmaker() as session:
        session.add_all(
            TenantModel(
                id=tenant_id,
                name=name,
                connection_url=url,
                is_active=is_active,
                display_name=name.title(),
            )
            for tenant_id, (name, is_active, url) in enumerate(rows, start=1)
        )
        await session.commit()

    yield sessionmaker

    await engine.dispose()


@pytest.fixture
def tenant_registry(registry_sessionmaker) -> TenantRegistry:
    return TenantRegistry(session_factory=registry_sessionmaker)


@pytest_asyncio.fixture
async def engine_cache() -> AsyncIterator[TenantEngineCache]:
    cache = TenantEngineCache(settings=TenancySettings())
    yield cache
    await cache.dispose_all()


@pytest.fixture
def products_factory(tenant_registry, engine_cache) -> TenantContextFactory:
    return TenantContextFactory(
        module=PRODUCTS_MODULE,
        registry=tenant_registry,
        engines=engine_cache,
    )


@pytest.fixture
def identity_factory(tenant_registry, engine_cache) -> TenantContextFactory:
    return TenantContextFactory(
        module=IDENTITY_MODULE,
        registry=tenant_registry,
        engines=engine_cache,
    )
