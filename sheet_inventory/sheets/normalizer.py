from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from ..models.column_index import ABSENT, ColumnIndex
from ..models.record import InventoryRecord, derive_status

"""Record normalizer: RawGrid -> typed InventoryRecord list.

Steps:
1. Treat grids with fewer than 2 rows (no header or no data) as empty
2. Trim header labels and infer one column per semantic role from them
3. Convert every data row (in order) into an InventoryRecord, keeping the
   full row keyed by header for generic display

Malformed cells never raise; they degrade to the documented fallbacks.
"""

__all__ = [
    "ROLE_TERMS",
    "infer_columns",
    "parse_number",
    "derive_status",
    "normalize",
]

logger = logging.getLogger(__name__)

# role -> header substrings, highest priority first
ROLE_TERMS: dict[str, tuple[str, ...]] = {
    "name": ("product name", "product", "item", "name"),
    "sku": ("sku", "code", "id"),
    "price": ("selling price", "price", "cost"),
    "stock": ("sync with shopify", "available stock", "current stock", "quantity", "inventory"),
    "restock_threshold": (
        "restock level",
        "restock",
        "min stock",
        "minimum stock",
        "reorder point",
        "threshold",
    ),
}

UNKNOWN_PRODUCT = "Unknown Product"

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def _find_header(lower_headers: Sequence[str], terms: Sequence[str]) -> int:
    for term in terms:
        for position, header in enumerate(lower_headers):
            if term in header:
                return position
    return ABSENT


def infer_columns(headers: Sequence[str]) -> ColumnIndex:
    """Resolve each semantic role to a header position.

    Terms are tried in priority order and, for each term, headers left to
    right; the first header containing the term wins. A higher-priority term
    therefore beats a lower-priority one regardless of where the headers sit
    (``["Item", "Product Name"]`` resolves ``name`` to "Product Name").
    """
    lower = [str(h).strip().lower() for h in headers]
    return ColumnIndex(**{role: _find_header(lower, terms) for role, terms in ROLE_TERMS.items()})


def parse_number(value: Any) -> float:
    """Leniently parse a cell into a float.

    Everything except digits, ``-`` and ``.`` is dropped, then the longest
    leading float literal is read. Anything unreadable is 0.

    >>> parse_number("$1,234.50")
    1234.5
    >>> parse_number("approx 5 pcs")
    5.0
    >>> parse_number("N/A")
    0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_FLOAT.match(cleaned)
    if match is None:
        return 0.0
    number = float(match.group(0))
    # overlong digit runs overflow to inf
    return number if math.isfinite(number) else 0.0


def _cell(row: Sequence[Any], position: int) -> Any:
    if position == ABSENT or position >= len(row):
        return None
    return row[position]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _cell_text(value: Any) -> str:
    # gviz は数値セルを float で返す (1001 -> 1001.0)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _to_record(
    row: Sequence[Any], index: int, headers: list[str], idx: ColumnIndex, fetched_at: str
) -> InventoryRecord:
    name_raw = _cell(row, idx.name)
    sku_raw = _cell(row, idx.sku)
    name = UNKNOWN_PRODUCT if _is_blank(name_raw) else _cell_text(name_raw)
    sku = f"SKU-{index}" if _is_blank(sku_raw) else _cell_text(sku_raw)

    all_columns: dict[str, Any] = {}
    for position, header in enumerate(headers):
        raw = _cell(row, position)
        all_columns[header] = "" if raw is None else raw

    return InventoryRecord(
        id=f"row-{index}-{sku}",
        name=name,
        sku=sku,
        # stock is non-negative; a negative count reads as sold out
        available_stock=max(0.0, parse_number(_cell(row, idx.stock))),
        restock_threshold=parse_number(_cell(row, idx.restock_threshold)),
        unit_price=parse_number(_cell(row, idx.price)),
        all_columns=all_columns,
        last_updated=fetched_at,
    )


def normalize(
    grid: Sequence[Sequence[Any]], *, fetched_at: datetime | None = None
) -> tuple[list[InventoryRecord], list[str]]:
    """Convert a raw grid into records plus the original column list.

    Parameters
    ----------
    grid: header row followed by data rows, cells untyped
    fetched_at: timestamp stamped on every record (defaults to now, UTC)

    Returns
    -------
    (records, columns); ``([], [])`` when the grid has no data rows.
    """
    if not grid or len(grid) < 2:
        logger.warning("sheet is empty or missing headers")
        return [], []

    stamp = (fetched_at or datetime.now(UTC)).isoformat().replace("+00:00", "Z")
    headers = ["" if h is None else str(h).strip() for h in grid[0]]
    idx = infer_columns(headers)
    unresolved = [role for role in ROLE_TERMS if not idx.resolved(role)]
    if unresolved:
        logger.debug(f"no header matched roles={unresolved}; using fallbacks")

    records: list[InventoryRecord] = []
    for index, raw_row in enumerate(grid[1:]):
        row = list(raw_row) if isinstance(raw_row, (list, tuple)) else []
        records.append(_to_record(row, index, headers, idx, stamp))
    return records, headers

