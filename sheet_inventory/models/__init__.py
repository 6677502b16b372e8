"""Domain models for the sheet inventory pipeline.

This package contains the typed records, the inferred column index and the
derived metrics produced by each fetch cycle.
"""

from .column_index import ABSENT, ColumnIndex
from .metrics import DashboardMetrics, LoadResult
from .record import InventoryRecord, StockStatus, derive_status

__all__ = [
    # Row models
    "InventoryRecord",
    "StockStatus",
    "derive_status",
    # Inference
    "ABSENT",
    "ColumnIndex",
    # Aggregates
    "DashboardMetrics",
    "LoadResult",
]
