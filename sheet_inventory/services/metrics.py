from __future__ import annotations

from collections.abc import Iterable

from ..models.metrics import DashboardMetrics
from ..models.record import InventoryRecord, StockStatus

"""Aggregate metrics and record selections over one fetch result."""

DEFAULT_CRITICAL_LEVEL = 10


def compute_metrics(records: Iterable[InventoryRecord]) -> DashboardMetrics:
    """Reduce a record list into dashboard metrics (empty list -> all zero)."""
    total = 0
    low = 0
    value = 0.0
    for r in records:
        total += 1
        if r.status in (StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK):
            low += 1
        value += r.stock_value
    return DashboardMetrics(total_products=total, low_stock_count=low, stock_value=value)


def select_restock_candidates(records: Iterable[InventoryRecord]) -> list[InventoryRecord]:
    """Records whose status is anything but In Stock, in sheet order."""
    return [r for r in records if r.needs_restock]


def critical_records(
    records: Iterable[InventoryRecord], level: float = DEFAULT_CRITICAL_LEVEL
) -> list[InventoryRecord]:
    # absolute stock ceiling, independent of each row's restock threshold
    return [r for r in records if r.available_stock <= level]
