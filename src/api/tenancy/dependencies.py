"""Dependency injection for the tenancy bounded context.

The registry is a process-wide singleton. The resolver is created once per
request: FastAPI caches dependency results per request, so every consumer
in one request sees the same resolver and the same resolved tenant.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from infrastructure.auth_dependencies import get_optional_claims
from infrastructure.database.dependencies import get_registry_sessionmaker
from infrastructure.settings import get_tenancy_settings
from shared_kernel.auth import TokenClaims
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.background import TenantJobRunner
from tenancy.application.resolver import (
    TENANT_HEADER,
    TENANT_QUERY_PARAM,
    TenantResolver,
    TenantSignals,
)
from tenancy.application.services import TenantDirectoryService
from tenancy.infrastructure.tenant_registry import CachingTenantRegistry, TenantRegistry
from tenancy.ports.repositories import ITenantRegistry


@lru_cache
def get_tenant_registry() -> ITenantRegistry:
    """Get the process-wide tenant registry.

    Wrapped in a record cache when TENANTRY_TENANCY_REGISTRY_CACHE_TTL_SECONDS
    is positive.
    """
    registry: ITenantRegistry = TenantRegistry(
        session_factory=get_registry_sessionmaker()
    )
    settings = get_tenancy_settings()
    if settings.registry_cache_ttl_seconds > 0:
        registry = CachingTenantRegistry(registry, ttl=settings.registry_cache_ttl)
    return registry


@lru_cache
def get_tenant_job_runner() -> TenantJobRunner:
    """Get the process-wide runner for tenant-scoped background jobs."""
    return TenantJobRunner(registry=get_tenant_registry())


def get_tenant_context_probe() -> TenantContextProbe:
    """Get TenantContextProbe instance."""
    return DefaultTenantContextProbe()


def get_tenant_signals(
    request: Request,
    claims: Annotated[TokenClaims | None, Depends(get_optional_claims)],
) -> TenantSignals:
    """Collect the tenant signals carried by the current request."""
    return TenantSignals(
        is_authenticated=claims is not None,
        claim_value=claims.tenant_id if claims is not None else None,
        header_value=request.headers.get(TENANT_HEADER),
        query_value=request.query_params.get(TENANT_QUERY_PARAM),
    )


def get_tenant_resolver(
    signals: Annotated[TenantSignals, Depends(get_tenant_signals)],
    probe: Annotated[TenantContextProbe, Depends(get_tenant_context_probe)],
) -> TenantResolver:
    """Get the resolver for the current request."""
    return TenantResolver(signals=signals, probe=probe)


def get_optional_tenant_context(
    resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
) -> TenantContext | None:
    """Resolve the current tenant, or None if the request names none.

    Raises:
        InvalidTenantIdError: If the winning signal is not a valid tenant id
    """
    return resolver.resolve()


def get_tenant_context(
    resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
) -> TenantContext:
    """Resolve the current tenant, failing if the request names none.

    Raises:
        TenantRequiredError: If no tenant is resolved
        InvalidTenantIdError: If the winning signal is not a valid tenant id
    """
    return resolver.require()


def get_tenant_directory_service(
    registry: Annotated[ITenantRegistry, Depends(get_tenant_registry)],
) -> TenantDirectoryService:
    """Get TenantDirectoryService instance."""
    return TenantDirectoryService(registry=registry)
