"""JWT validation module for OIDC SSO.

Validates bearer tokens against the OIDC provider's JWKS and extracts the
caller identity, including the tenant claim that outranks any tenant
header or query parameter the caller sends.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import TokenValidationProbe


@dataclass(frozen=True)
class TokenClaims:
    """Validated JWT claims.

    Attributes:
        sub: Caller identifier.
        preferred_username: Display username, if the token carries one.
        tenant_id: Raw tenant claim value, if the token carries one.
            Parsing is left to tenant resolution.
    """

    sub: str
    preferred_username: str | None
    tenant_id: str | None = None


class InvalidTokenError(Exception):
    """Raised when JWT validation fails."""

    pass


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class JWTValidator:
    """Validates JWT tokens using the OIDC provider's JWKS.

    Fetches JWKS through OIDC discovery and caches them for the configured
    TTL. Validates signature (RS256), expiry, issuer and audience.
    """

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        probe: TokenValidationProbe,
        user_id_claim: str = "sub",
        username_claim: str = "preferred_username",
        tenant_claim: str = "TenantId",
        jwks_cache_ttl: timedelta = timedelta(hours=24),
    ):
        """Initialize the JWT validator.

        Args:
            issuer_url: The OIDC issuer URL.
            audience: Expected audience claim value.
            probe: Observability probe for logging events.
            user_id_claim: JWT claim holding the user id.
            username_claim: JWT claim holding the username.
            tenant_claim: JWT claim holding the tenant id.
            jwks_cache_ttl: How long fetched JWKS are reused.
        """
        self._issuer_url = issuer_url.rstrip("/")
        self._audience = audience
        self._probe = probe
        self._user_id_claim = user_id_claim
        self._username_claim = username_claim
        self._tenant_claim = tenant_claim
        self._jwks_cache_ttl = jwks_cache_ttl

        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: datetime | None = None
        self._jwks_lock = asyncio.Lock()

    async def validate_token(self, token: str) -> TokenClaims:
        """Validate a JWT and return its claims.

        Args:
            token: The JWT token string.

        Returns:
            TokenClaims containing the validated claims.

        Raises:
            InvalidTokenError: If token is invalid, expired, or verification fails.
        """
        try:
            unverified_header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise self._reject(f"Malformed token: {e}", f"Invalid token format: {e}") from e

        if not unverified_header:
            raise self._reject("Missing token header", "Invalid token: missing header")

        jwks = await self._get_jwks()

        try:
            claims = jwt.decode(
                token=token,
                key=jwks,
                algorithms=["RS256"],
                audience=self._audience,
                issuer=self._issuer_url,
                options={
                    "verify_signature": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "verify_exp": True,
                    "verify_iat": True,
                },
            )
        except ExpiredSignatureError as e:
            raise self._reject("Token expired", "Token has expired") from e
        except JWTClaimsError as e:
            error_msg = str(e).lower()
            if "audience" in error_msg:
                raise self._reject("Invalid audience", "Invalid audience claim") from e
            if "issuer" in error_msg:
                raise self._reject("Invalid issuer", "Invalid issuer claim") from e
            raise self._reject(f"Claims error: {e}", f"Invalid token claims: {e}") from e
        except JWTError as e:
            if "signature" in str(e).lower():
                raise self._reject("Invalid signature", "Invalid token signature") from e
            raise self._reject(f"JWT error: {e}", f"Invalid token: {e}") from e

        user_id = claims.get(self._user_id_claim)
        if user_id is None:
            raise self._reject(
                f"Missing {self._user_id_claim} claim",
                f"Missing required claim: {self._user_id_claim}",
            )

        tenant_id = _optional_str(claims.get(self._tenant_claim))
        self._probe.token_accepted(
            user_id=str(user_id), has_tenant_claim=tenant_id is not None
        )

        return TokenClaims(
            sub=str(user_id),
            preferred_username=_optional_str(claims.get(self._username_claim)),
            tenant_id=tenant_id,
        )

    def _reject(self, reason: str, message: str) -> InvalidTokenError:
        self._probe.token_rejected(reason=reason)
        return InvalidTokenError(message)

    async def _get_jwks(self) -> dict[str, Any]:
        """Get JWKS, fetching from the issuer if the cache expired.

        Raises:
            InvalidTokenError: If JWKS cannot be fetched.
        """
        if self._is_cache_valid():
            self._probe.signing_keys_reused()
            return self._jwks  # type: ignore[return-value]

        async with self._jwks_lock:
            # Double-check after acquiring lock
            if self._is_cache_valid():
                self._probe.signing_keys_reused()
                return self._jwks  # type: ignore[return-value]

            return await self._fetch_jwks()

    def _is_cache_valid(self) -> bool:
        if self._jwks is None or self._jwks_fetched_at is None:
            return False

        now = datetime.now(tz=timezone.utc)
        return (now - self._jwks_fetched_at) < self._jwks_cache_ttl

    async def _fetch_jwks(self) -> dict[str, Any]:
        """Fetch JWKS via the provider's OpenID discovery document.

        Raises:
            InvalidTokenError: If JWKS cannot be fetched.
        """
        discovery_url = f"{self._issuer_url}/.well-known/openid-configuration"
        try:
            async with httpx.AsyncClient() as client:
                config_response = await client.get(discovery_url)
                config_response.raise_for_status()
                jwks_uri = config_response.json().get("jwks_uri")

                if not jwks_uri:
                    self._probe.signing_keys_unavailable(
                        error="Missing jwks_uri in OpenID configuration"
                    )
                    raise InvalidTokenError(
                        "OIDC provider missing jwks_uri in configuration"
                    )

                jwks_response = await client.get(jwks_uri)
                jwks_response.raise_for_status()
                jwks = jwks_response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._probe.signing_keys_unavailable(error=str(e))
            raise InvalidTokenError(
                f"Failed to fetch JWKS from OIDC provider: {e}"
            ) from e

        self._jwks = jwks
        self._jwks_fetched_at = datetime.now(tz=timezone.utc)
        self._probe.signing_keys_refreshed(key_count=len(jwks.get("keys", [])))
        return jwks
