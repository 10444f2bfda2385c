"""Per-scope tenant resolution.

A TenantResolver is created once per request (or per background job
scope) and decides which tenant the work in that scope belongs to.
Signals are consulted in a fixed order and the first match wins:

1. An explicit override set by trusted code (background jobs).
2. The ``TenantId`` claim of an authenticated caller.
3. The ``X-Tenant-ID`` header, for unauthenticated callers only.
4. The ``tenantId`` query parameter, for unauthenticated callers without
   the header.

An authenticated caller's header and query values are never trusted, even
when the token carries no tenant claim.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext, TenantSource
from shared_kernel.tenancy import InvalidTenantIdError, TenantRequiredError
from tenancy.domain.value_objects import TenantId

TENANT_CLAIM = "TenantId"
TENANT_HEADER = "X-Tenant-ID"
TENANT_QUERY_PARAM = "tenantId"


@dataclass(frozen=True)
class TenantSignals:
    """Raw tenant signals carried by one request.

    Empty strings are treated the same as absent values.
    """

    is_authenticated: bool = False
    claim_value: str | None = None
    header_value: str | None = None
    query_value: str | None = None


def _present(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


class TenantResolver:
    """Resolves the tenant of one scope and caches the outcome.

    Not shared between scopes and not safe to share between concurrent
    tasks; every request and every background job gets its own instance.
    """

    def __init__(
        self,
        signals: TenantSignals | None = None,
        probe: TenantContextProbe | None = None,
    ) -> None:
        self._signals = signals or TenantSignals()
        self._probe = probe or DefaultTenantContextProbe()
        self._explicit: TenantContext | None = None
        self._resolved: TenantContext | None = None
        self._evaluated = False

    def resolve(self) -> TenantContext | None:
        """Return the current tenant, or None if no signal identifies one.

        The signal-based outcome is computed once and reused for the rest
        of the scope.

        Raises:
            InvalidTenantIdError: If the winning signal is not a valid tenant id
        """
        if self._explicit is not None:
            return self._explicit

        if not self._evaluated:
            self._resolved = self._resolve_from_signals()
            self._evaluated = True
        return self._resolved

    def require(self) -> TenantContext:
        """Return the current tenant, failing if none is resolved.

        Raises:
            TenantRequiredError: If no tenant is resolved
            InvalidTenantIdError: If the winning signal is not a valid tenant id
        """
        tenant = self.resolve()
        if tenant is None:
            self._probe.tenant_required()
            raise TenantRequiredError()
        return tenant

    def has_tenant(self) -> bool:
        """Whether a tenant is resolved for this scope."""
        return self.resolve() is not None

    def set_explicit(self, tenant_id: int) -> None:
        """Pin this scope to a tenant, overriding every request signal.

        Args:
            tenant_id: Positive tenant id

        Raises:
            InvalidTenantIdError: If tenant_id is not a positive integer
        """
        try:
            value = TenantId(value=tenant_id)
        except ValueError as e:
            raise InvalidTenantIdError(str(tenant_id), TenantSource.EXPLICIT) from e

        self._explicit = TenantContext(tenant_id=value.value, source=TenantSource.EXPLICIT)
        self._probe.explicit_tenant_set(value.value)

    def clear_explicit(self) -> None:
        """Drop the explicit override; request signals apply again."""
        if self._explicit is None:
            return
        cleared = self._explicit
        self._explicit = None
        self._probe.explicit_tenant_cleared(cleared.tenant_id)

    def _resolve_from_signals(self) -> TenantContext | None:
        signals = self._signals
        header = _present(signals.header_value)
        query = _present(signals.query_value)

        if signals.is_authenticated:
            if header is not None:
                self._probe.untrusted_signal_ignored(TenantSource.HEADER, header)
            if query is not None:
                self._probe.untrusted_signal_ignored(TenantSource.QUERY, query)

            claim = _present(signals.claim_value)
            if claim is None:
                self._probe.tenant_unresolved(authenticated=True)
                return None
            return self._parse(claim, TenantSource.CLAIM)

        if header is not None:
            return self._parse(header, TenantSource.HEADER)
        if query is not None:
            return self._parse(query, TenantSource.QUERY)

        self._probe.tenant_unresolved(authenticated=False)
        return None

    def _parse(self, raw_value: str, source: TenantSource) -> TenantContext:
        try:
            tenant_id = TenantId.from_string(raw_value)
        except ValueError as e:
            self._probe.invalid_tenant_id_format(raw_value, source)
            raise InvalidTenantIdError(raw_value, source) from e

        self._probe.tenant_resolved(tenant_id.value, source)
        return TenantContext(tenant_id=tenant_id.value, source=source)
