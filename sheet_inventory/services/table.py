from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from ..models.record import InventoryRecord

"""Tabular view of a fetch result (every sheet column plus derived status)."""

STATUS_COLUMN = "Status"


def records_to_frame(records: Sequence[InventoryRecord], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame with one row per record.

    Columns keep the sheet order; duplicate header labels collapse to one
    column, mirroring ``InventoryRecord.all_columns``. A ``Status`` column is
    appended (suffixed if the sheet already has one).
    """
    ordered = list(dict.fromkeys(columns))
    status_col = STATUS_COLUMN
    while status_col in ordered:
        status_col = f"{status_col}_"
    rows = []
    for r in records:
        row = {c: r.all_columns.get(c, "") for c in ordered}
        row[status_col] = r.status.value
        rows.append(row)
    return pd.DataFrame(rows, columns=[*ordered, status_col])


def render_table(records: Sequence[InventoryRecord], columns: Sequence[str]) -> str:
    if not records:
        return "(no rows)"
    return records_to_frame(records, columns).to_string(index=False)
