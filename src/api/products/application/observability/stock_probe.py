"""Domain probe for the low stock check job."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StockCheckProbe(Protocol):
    """Domain probe for stock checks."""

    def low_stock_detected(
        self, tenant_id: int, product_count: int, threshold: int
    ) -> None:
        """Record that a tenant has products below the stock threshold."""
        ...

    def with_context(self, context: ObservationContext) -> StockCheckProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStockCheckProbe:
    """Default implementation of StockCheckProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStockCheckProbe:
        """Create a new probe with observation context bound."""
        return DefaultStockCheckProbe(logger=self._logger, context=context)

    def low_stock_detected(
        self, tenant_id: int, product_count: int, threshold: int
    ) -> None:
        """Record that a tenant has products below the stock threshold."""
        self._logger.warning(
            "products_low_stock_detected",
            tenant_id=tenant_id,
            product_count=product_count,
            threshold=threshold,
            **self._get_context_kwargs(),
        )
