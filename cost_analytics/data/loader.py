"""
Workbook decoding and billing-API payload mapping into a RawGrid.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Any, BinaryIO, Union

import pandas as pd

from cost_analytics.config import BILLING_COLUMN_ALIASES, WORKBOOK_EXTENSIONS
from cost_analytics.data.cells import is_blank
from cost_analytics.data.schemas import ColumnMapping, RawGrid
from cost_analytics.errors import ParseFailure

WorkbookSource = Union[str, Path, bytes, BinaryIO]


# ---------------------------------------------------------------------------
# Header detection
# ---------------------------------------------------------------------------

def split_header(rows: list[list[Any]]) -> RawGrid:
    """Treat the first row as a header when every non-empty cell in it is text.

    Blank header cells are named ``Column N`` after their position.
    """
    if not rows:
        return RawGrid(rows=[], header=None, header_detected=False)

    first = rows[0]
    filled = [c for c in first if not is_blank(c)]
    if filled and all(isinstance(c, str) for c in filled):
        width = max(len(r) for r in rows)
        header = [
            first[i] if i < len(first) and not is_blank(first[i]) else f"Column {i}"
            for i in range(width)
        ]
        return RawGrid(rows=[list(r) for r in rows[1:]], header=header, header_detected=True)

    return RawGrid(rows=[list(r) for r in rows], header=None, header_detected=False)


# ---------------------------------------------------------------------------
# Workbook reading
# ---------------------------------------------------------------------------

def _frame_to_rows(df: pd.DataFrame) -> list[list[Any]]:
    """Drop blank rows and turn NaN/NaT into None."""
    df = df.dropna(how="all")
    if df.empty:
        return []
    df = df.astype(object).where(pd.notna(df), None)
    return df.values.tolist()


def read_workbook(source: WorkbookSource) -> list[list[Any]]:
    """Read the first sheet of a workbook as a list of raw cell rows.

    Raises ParseFailure when the content can't be decoded.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if path.suffix.lower() not in WORKBOOK_EXTENSIONS:
            raise ParseFailure(f"Unsupported file type '{path.suffix}' (expected {', '.join(WORKBOOK_EXTENSIONS)})")
        if not path.exists():
            raise ParseFailure(f"File not found: {path}")
    elif isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        df = pd.read_excel(source, sheet_name=0, header=None, dtype=object)
    except Exception as exc:
        raise ParseFailure(f"Failed to parse Excel file: {exc}") from exc

    return _frame_to_rows(df)


def load_workbook(source: WorkbookSource) -> RawGrid:
    """Decode a workbook into a RawGrid with an optional detected header."""
    return split_header(read_workbook(source))


# ---------------------------------------------------------------------------
# Billing API query results
# ---------------------------------------------------------------------------

def _billing_role(names: list[str], role: str) -> int | None:
    for alias in BILLING_COLUMN_ALIASES[role]:
        for idx, name in enumerate(names):
            if name.lower() == alias.lower():
                return idx
    return None


def load_billing_result(payload: dict) -> tuple[RawGrid, ColumnMapping]:
    """Map a ``{"columns": [{"name": ...}], "rows": [[...]]}`` query result.

    The shape may also be nested under ``properties``. Columns are mapped by
    name: UsageDate/Date → date, Cost/PreTaxCost → metric, ServiceName →
    category. Unnamed roles fall back to column 0.
    """
    if not isinstance(payload, dict):
        raise ParseFailure("Billing result must be a JSON object")
    body = payload.get("properties", payload)
    if not isinstance(body, dict):
        raise ParseFailure("Billing result 'properties' must be a JSON object")

    columns = body.get("columns")
    rows = body.get("rows")
    if not isinstance(columns, list) or not isinstance(rows, list):
        raise ParseFailure("Billing result needs 'columns' and 'rows' lists")

    try:
        names = [str(c["name"]) for c in columns]
    except (KeyError, TypeError) as exc:
        raise ParseFailure(f"Billing column without a name: {exc}") from exc
    if any(not isinstance(r, list) for r in rows):
        raise ParseFailure("Billing rows must be lists of cells")

    grid = RawGrid(rows=[list(r) for r in rows], header=names, header_detected=True)

    date_idx = _billing_role(names, "date")
    metric_idx = _billing_role(names, "metric")
    category_idx = _billing_role(names, "category")
    mapping = ColumnMapping(
        date_idx=date_idx if date_idx is not None else 0,
        metric_idx=metric_idx if metric_idx is not None else 0,
        category_idx=category_idx if category_idx is not None else 0,
    )
    return grid, mapping.validate(grid.width)
