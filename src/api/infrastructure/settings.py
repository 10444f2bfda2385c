"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Tenant registry database connection settings.

    The registry database holds the tenant catalog only. Tenant data lives
    in per-tenant databases whose coordinates are stored in the registry.

    Environment variables:
        TENANTRY_DB_HOST: Database host (default: localhost)
        TENANTRY_DB_PORT: Database port (default: 5432)
        TENANTRY_DB_DATABASE: Database name (default: tenantry)
        TENANTRY_DB_USERNAME: Database user (default: tenantry)
        TENANTRY_DB_PASSWORD: Database password (required in production)
        TENANTRY_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        TENANTRY_DB_ECHO: Log emitted SQL (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTRY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="tenantry", description="Database name")
    username: str = Field(default="tenantry", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log emitted SQL")

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class TenancySettings(BaseSettings):
    """Per-tenant database routing settings.

    Environment variables:
        TENANTRY_TENANCY_POOL_SIZE: Connections per tenant pool (default: 5)
        TENANTRY_TENANCY_POOL_MAX_OVERFLOW: Extra connections per tenant pool (default: 0)
        TENANTRY_TENANCY_POOL_RECYCLE_SECONDS: Connection recycle age (default: 1800)
        TENANTRY_TENANCY_POOL_PRE_PING: Verify connections before use (default: true)
        TENANTRY_TENANCY_REGISTRY_CACHE_TTL_SECONDS: Registry record cache TTL,
            0 disables caching (default: 0)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTRY_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    pool_size: int = Field(
        default=5,
        description="Connections per tenant pool",
        ge=1,
        le=100,
    )
    pool_max_overflow: int = Field(
        default=0,
        description="Extra connections allowed beyond pool_size",
        ge=0,
        le=100,
    )
    pool_recycle_seconds: int = Field(
        default=1800,
        description="Recycle pooled connections older than this",
        ge=-1,
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Verify connections before handing them out",
    )
    registry_cache_ttl_seconds: int = Field(
        default=0,
        description="How long tenant registry records are cached (0 = disabled)",
        ge=0,
    )

    @property
    def registry_cache_ttl(self) -> timedelta:
        """Registry cache TTL as a timedelta."""
        return timedelta(seconds=self.registry_cache_ttl_seconds)


class OIDCSettings(BaseSettings):
    """OIDC bearer token validation settings.

    Environment variables:
        TENANTRY_OIDC_ISSUER_URL: OIDC issuer URL
        TENANTRY_OIDC_CLIENT_ID: OAuth2 client id (default: tenantry-api)
        TENANTRY_OIDC_AUDIENCE: Expected audience (default: client id)
        TENANTRY_OIDC_USER_ID_CLAIM: Claim holding the user id (default: sub)
        TENANTRY_OIDC_USERNAME_CLAIM: Claim holding the username
            (default: preferred_username)
        TENANTRY_OIDC_TENANT_CLAIM: Claim holding the tenant id (default: TenantId)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTRY_OIDC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer_url: str = Field(
        default="http://localhost:8080/realms/tenantry",
        description="OIDC issuer URL",
    )
    client_id: str = Field(default="tenantry-api", description="OAuth2 client id")
    audience: str | None = Field(
        default=None,
        description="Expected audience claim (defaults to client_id)",
    )
    user_id_claim: str = Field(default="sub", description="User id claim")
    username_claim: str = Field(
        default="preferred_username",
        description="Username claim",
    )
    tenant_claim: str = Field(default="TenantId", description="Tenant id claim")

    @property
    def effective_audience(self) -> str:
        """Audience to validate against."""
        return self.audience or self.client_id


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tenantry API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def tenancy(self) -> TenancySettings:
        """Get tenancy settings."""
        return get_tenancy_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings."""
    return TenancySettings()


@lru_cache
def get_oidc_settings() -> OIDCSettings:
    """Get cached OIDC settings."""
    return OIDCSettings()
