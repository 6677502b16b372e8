from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .record import InventoryRecord

"""Dashboard metrics and load result models.

Both are derived data: they are recomputed on every fetch and never persisted.
"""

__all__ = [
    "DashboardMetrics",
    "LoadResult",
]


@dataclass(frozen=True)
class DashboardMetrics:
    total_products: int  # record count
    low_stock_count: int  # Low Stock + Out of Stock
    stock_value: float  # sum(available_stock * unit_price)


@dataclass(frozen=True)
class LoadResult:
    """Output of one fetch + normalize cycle, handed to the presentation layer."""
    records: list[InventoryRecord]
    columns: list[str]  # original header labels (trimmed, sheet order)
    metrics: DashboardMetrics
    fetched_at: datetime
