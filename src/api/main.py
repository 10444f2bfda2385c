"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from identity.presentation import routes as identity_routes
from infrastructure.database.dependencies import close_database_connections
from infrastructure.database.exceptions import (
    PersistenceConflictError,
    PersistenceUnavailableError,
)
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from products.presentation import routes as products_routes
from shared_kernel.tenancy import InvalidTenantIdError, TenantAccessError
from tenancy.presentation import routes as tenancy_routes


@asynccontextmanager
async def tenantry_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Registry and tenant engine lifecycle (created lazily, disposed on shutdown)
    """
    settings = get_settings()
    configure_logging(service=settings.app_name, debug=settings.debug)

    yield

    await close_database_connections()


app = FastAPI(
    title="Tenantry API",
    description="Database-per-tenant catalog and user directory",
    version=__version__,
    lifespan=tenantry_lifespan,
)

# Include bounded context routes
app.include_router(tenancy_routes.router)
app.include_router(products_routes.router)
app.include_router(identity_routes.router)


@app.exception_handler(TenantAccessError)
async def tenant_access_error_handler(request: Request, exc: TenantAccessError):
    """Handle missing, unknown and deactivated tenants."""
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc), "type": "tenant_access_denied"},
    )


@app.exception_handler(InvalidTenantIdError)
async def invalid_tenant_id_handler(request: Request, exc: InvalidTenantIdError):
    """Handle tenant signals that are not valid tenant ids."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "type": "invalid_tenant_id"},
    )


@app.exception_handler(PersistenceUnavailableError)
async def persistence_unavailable_handler(
    request: Request, exc: PersistenceUnavailableError
):
    """Handle unreachable registry or tenant databases."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "type": "persistence_unavailable"},
    )


@app.exception_handler(PersistenceConflictError)
async def persistence_conflict_handler(
    request: Request, exc: PersistenceConflictError
):
    """Handle commits rejected by a constraint."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "type": "persistence_conflict"},
    )


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
