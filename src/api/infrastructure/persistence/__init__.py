"""Tenant-routed persistence: context factories, units of work and repositories."""

from infrastructure.persistence.context_factory import (
    ModuleSchema,
    SessionCoordinates,
    TenantContextFactory,
    module_schema_coordinates,
)
from infrastructure.persistence.repository import (
    Page,
    ProjectionError,
    Repository,
    RepositoryRegistry,
    UnregisteredEntityError,
)
from infrastructure.persistence.unit_of_work import (
    UnitOfWork,
    UnitOfWorkClosedError,
    UnitOfWorkState,
)

__all__ = [
    "ModuleSchema",
    "Page",
    "ProjectionError",
    "Repository",
    "RepositoryRegistry",
    "SessionCoordinates",
    "TenantContextFactory",
    "UnitOfWork",
    "UnitOfWorkClosedError",
    "UnitOfWorkState",
    "UnregisteredEntityError",
    "module_schema_coordinates",
]
