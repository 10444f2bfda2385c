"""Bearer token validation and the tenant claim it carries."""

from shared_kernel.auth.jwt_validator import (
    InvalidTokenError,
    JWTValidator,
    TokenClaims,
)
from shared_kernel.auth.observability import (
    DefaultTokenValidationProbe,
    TokenValidationProbe,
)

__all__ = [
    "DefaultTokenValidationProbe",
    "InvalidTokenError",
    "JWTValidator",
    "TokenValidationProbe",
    "TokenClaims",
]
