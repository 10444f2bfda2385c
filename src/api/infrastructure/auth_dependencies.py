"""Bearer token authentication dependencies for FastAPI.

Authentication is optional at this layer: requests without a token are
anonymous, and only a token that is present but invalid is rejected.
Whether a caller is authenticated decides which tenant signals are
trusted, so anonymous callers are not an error here.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2AuthorizationCodeBearer

from infrastructure.settings import get_oidc_settings
from shared_kernel.auth import InvalidTokenError, JWTValidator, TokenClaims
from shared_kernel.auth.observability import DefaultTokenValidationProbe


def _get_oidc_issuer_url() -> str:
    """Get OIDC issuer URL from environment or use default.

    Used to configure the OAuth2 security scheme at module load time,
    before full OIDC settings validation occurs. The default matches
    OIDCSettings.issuer_url.
    """
    return os.getenv(
        "TENANTRY_OIDC_ISSUER_URL",
        "http://localhost:8080/realms/tenantry",
    )


def _create_oauth2_scheme() -> OAuth2AuthorizationCodeBearer:
    """Create OAuth2 security scheme for Swagger UI integration."""
    issuer = _get_oidc_issuer_url()

    return OAuth2AuthorizationCodeBearer(
        authorizationUrl=f"{issuer}/protocol/openid-connect/auth",
        tokenUrl=f"{issuer}/protocol/openid-connect/token",
        refreshUrl=f"{issuer}/protocol/openid-connect/token",
        scopes={
            "openid": "OpenID Connect",
            "profile": "User profile",
        },
        auto_error=False,
    )


oauth2_scheme = _create_oauth2_scheme()


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get the process-wide JWT validator, so its JWKS cache is shared.

    Returns:
        JWTValidator instance configured from OIDC settings.
    """
    settings = get_oidc_settings()
    return JWTValidator(
        issuer_url=settings.issuer_url,
        audience=settings.effective_audience,
        probe=DefaultTokenValidationProbe(),
        user_id_claim=settings.user_id_claim,
        username_claim=settings.username_claim,
        tenant_claim=settings.tenant_claim,
    )


async def get_optional_claims(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
) -> TokenClaims | None:
    """Validate the bearer token if one was sent.

    Returns:
        The validated claims, or None for anonymous requests

    Raises:
        HTTPException 401: If a token was sent but is invalid or expired
    """
    if token is None:
        return None

    try:
        return await validator.validate_token(token)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
