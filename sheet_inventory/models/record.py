from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

"""InventoryRecord model.

One record is the typed form of one data row of the sheet. Records are
rebuilt from scratch on every fetch and never mutated afterwards.
"""

__all__ = [
    "StockStatus",
    "InventoryRecord",
    "derive_status",
]


class StockStatus(str, Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


def derive_status(available_stock: float, restock_threshold: float) -> StockStatus:
    """Compute the stock state from the two numeric fields.

    >>> derive_status(0, 10).value
    'Out of Stock'
    >>> derive_status(10, 10).value
    'Low Stock'
    >>> derive_status(11, 10).value
    'In Stock'
    """
    if available_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if available_stock <= restock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


@dataclass(frozen=True)
class InventoryRecord:
    """Normalized representation of one spreadsheet row.

    ``status`` is a property rather than a field so it can never drift from
    ``available_stock`` / ``restock_threshold``.
    """
    id: str  # row-<index>-<sku>, unique within one fetch only
    name: str
    sku: str
    available_stock: float
    restock_threshold: float
    unit_price: float
    all_columns: Mapping[str, Any] = field(default_factory=dict, hash=False)  # header -> raw cell (sheet order)
    last_updated: str = ""  # ISO8601 UTC of the fetch cycle

    def __post_init__(self) -> None:
        # frozen なので object.__setattr__ で読み取り専用ビューに差し替え
        if not isinstance(self.all_columns, MappingProxyType):
            object.__setattr__(self, "all_columns", MappingProxyType(dict(self.all_columns)))

    @property
    def status(self) -> StockStatus:
        return derive_status(self.available_stock, self.restock_threshold)

    @property
    def stock_value(self) -> float:
        return self.available_stock * self.unit_price

    @property
    def needs_restock(self) -> bool:
        return self.status is not StockStatus.IN_STOCK
