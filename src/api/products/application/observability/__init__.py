"""Domain-Oriented Observability for the products application layer."""

from products.application.observability.stock_probe import (
    DefaultStockCheckProbe,
    StockCheckProbe,
)

__all__ = [
    "DefaultStockCheckProbe",
    "StockCheckProbe",
]
