from __future__ import annotations

from dataclasses import dataclass

"""ColumnIndex model.

Maps each semantic role to the position of the header that was inferred for
it. ``ABSENT`` (-1) means no header matched and the record field falls back
to its default.
"""

__all__ = [
    "ABSENT",
    "ColumnIndex",
]

ABSENT = -1


@dataclass(frozen=True)
class ColumnIndex:
    name: int = ABSENT
    sku: int = ABSENT
    price: int = ABSENT
    stock: int = ABSENT
    restock_threshold: int = ABSENT

    def resolved(self, role: str) -> bool:
        return getattr(self, role) != ABSENT
