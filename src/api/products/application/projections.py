"""Read projections over products.

Repositories select only the columns named by a projection's fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProductSummary:
    """Catalog listing entry."""

    id: str
    name: str
    price: Decimal


@dataclass(frozen=True)
class ProductStockLevel:
    """Stock level of one product."""

    id: str
    name: str
    stock: int
