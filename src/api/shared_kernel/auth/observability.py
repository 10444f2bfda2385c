"""Domain probe for bearer token validation.

Only the caller id and whether a tenant claim was present are logged;
other token contents, including the tenant claim value, never are.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TokenValidationProbe(Protocol):
    """Domain probe for bearer token validation."""

    def token_accepted(self, user_id: str, has_tenant_claim: bool) -> None:
        """Record that a token passed validation."""
        ...

    def token_rejected(self, reason: str) -> None:
        """Record that a token was rejected."""
        ...

    def signing_keys_refreshed(self, key_count: int) -> None:
        """Record that signing keys were fetched from the issuer."""
        ...

    def signing_keys_reused(self) -> None:
        """Record that cached signing keys were used."""
        ...

    def signing_keys_unavailable(self, error: str) -> None:
        """Record that signing keys could not be fetched."""
        ...

    def with_context(self, context: ObservationContext) -> TokenValidationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTokenValidationProbe:
    """structlog-backed TokenValidationProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTokenValidationProbe:
        return DefaultTokenValidationProbe(logger=self._logger, context=context)

    def token_accepted(self, user_id: str, has_tenant_claim: bool) -> None:
        self._logger.info(
            "bearer_token_accepted",
            user_id=user_id,
            has_tenant_claim=has_tenant_claim,
            **self._get_context_kwargs(),
        )

    def token_rejected(self, reason: str) -> None:
        self._logger.warning(
            "bearer_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def signing_keys_refreshed(self, key_count: int) -> None:
        self._logger.info(
            "signing_keys_refreshed",
            key_count=key_count,
            **self._get_context_kwargs(),
        )

    def signing_keys_reused(self) -> None:
        self._logger.debug("signing_keys_reused", **self._get_context_kwargs())

    def signing_keys_unavailable(self, error: str) -> None:
        self._logger.error(
            "signing_keys_unavailable",
            error=error,
            **self._get_context_kwargs(),
        )
