"""Unit test fixtures with mocked dependencies."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from infrastructure.persistence import ModuleSchema, RepositoryRegistry
from infrastructure.persistence.observability import (
    TenantSessionProbe,
    UnitOfWorkProbe,
)
from products.infrastructure.models import ProductModel, ProductsBase
from shared_kernel.middleware.observability import TenantContextProbe
from shared_kernel.middleware.tenant_context import TenantContext, TenantSource
from shared_kernel.tenancy import TenantTarget


@pytest.fixture
def mock_tenant_context_probe() -> MagicMock:
    """Provide a mocked tenant context probe."""
    return MagicMock(spec=TenantContextProbe)


@pytest.fixture
def mock_session_probe() -> MagicMock:
    """Provide a mocked tenant session probe."""
    return MagicMock(spec=TenantSessionProbe)


@pytest.fixture
def mock_uow_probe() -> MagicMock:
    """Provide a mocked unit of work probe."""
    return MagicMock(spec=UnitOfWorkProbe)


@pytest.fixture
def tenant_one() -> TenantContext:
    """A tenant resolved from a header."""
    return TenantContext(tenant_id=1, source=TenantSource.HEADER)


@pytest.fixture
def products_module() -> ModuleSchema:
    """A module schema exposing only products."""
    return ModuleSchema(
        name="products",
        metadata=ProductsBase.metadata,
        repositories=RepositoryRegistry().register(ProductModel),
    )


@pytest.fixture
def mock_lookup() -> AsyncMock:
    """Provide a tenant lookup returning a SQLite target for any tenant."""
    lookup = AsyncMock()
    lookup.get_target.side_effect = lambda tenant_id: TenantTarget(
        tenant_id=tenant_id,
        connection_url=f"sqlite+aiosqlite:///tenant_{tenant_id}.db",
    )
    return lookup


@pytest.fixture
def mock_session() -> MagicMock:
    """Provide a mocked AsyncSession with empty change sets."""
    session = MagicMock()
    session.new = set()
    session.deleted = set()
    session.dirty = set()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.scalar = AsyncMock()
    session.connection = AsyncMock()
    return session
