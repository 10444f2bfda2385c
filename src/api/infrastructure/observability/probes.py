"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class EngineProbe(Protocol):
    """Domain probe for database engine and pool observability.

    Covers the registry engine and the per-tenant engine cache. URLs passed
    to this probe must already have their password masked.
    """

    def engine_created(self, tenant_id: int | None, url: str) -> None:
        """Record that an engine (and its pool) was created."""
        ...

    def engine_disposed(self, tenant_id: int | None, url: str) -> None:
        """Record that an engine was disposed and its pool closed."""
        ...

    def engine_dispose_failed(
        self, tenant_id: int | None, url: str, error: Exception
    ) -> None:
        """Record that disposing an engine failed."""
        ...

    def registry_pool_closed(self) -> None:
        """Record that the registry connection pool was closed."""
        ...

    def with_context(self, context: ObservationContext) -> EngineProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultEngineProbe:
    """Default implementation of EngineProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultEngineProbe:
        """Create a new probe with observation context bound."""
        return DefaultEngineProbe(logger=self._logger, context=context)

    def engine_created(self, tenant_id: int | None, url: str) -> None:
        """Record that an engine (and its pool) was created."""
        self._logger.info(
            "database_engine_created",
            tenant_id=tenant_id,
            url=url,
            **self._get_context_kwargs(),
        )

    def engine_disposed(self, tenant_id: int | None, url: str) -> None:
        """Record that an engine was disposed and its pool closed."""
        self._logger.info(
            "database_engine_disposed",
            tenant_id=tenant_id,
            url=url,
            **self._get_context_kwargs(),
        )

    def engine_dispose_failed(
        self, tenant_id: int | None, url: str, error: Exception
    ) -> None:
        """Record that disposing an engine failed."""
        self._logger.error(
            "database_engine_dispose_failed",
            tenant_id=tenant_id,
            url=url,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def registry_pool_closed(self) -> None:
        """Record that the registry connection pool was closed."""
        self._logger.info(
            "registry_pool_closed",
            **self._get_context_kwargs(),
        )
