"""
Column role guessing: which column holds dates, which the cost, which the service.
"""
from __future__ import annotations

from typing import Any, Optional

from cost_analytics.config import (
    CLASSIFY_SAMPLE_ROWS, NUMERIC_RANK_SAMPLE_ROWS, COLUMN_SAMPLE_SIZE,
    HEADER_ROLE_ALIASES, EMPTY_GROUP,
)
from cost_analytics.data.cells import cell_text, is_blank, is_numeric_cell, is_pure_number
from cost_analytics.data.dates import parse_date_with_format
from cost_analytics.data.schemas import ColumnMapping, DateFormat, RawGrid


# ---------------------------------------------------------------------------
# Per-column scores
# ---------------------------------------------------------------------------

def _cell(row: list[Any], idx: int) -> Any:
    return row[idx] if idx < len(row) else None


def score_date_column(rows: list[list[Any]], idx: int, sample: int = CLASSIFY_SAMPLE_ROWS) -> int:
    """Count sampled cells that parse as a date and are not plain numbers."""
    hits = 0
    for row in rows[:sample]:
        v = _cell(row, idx)
        if is_blank(v):
            continue
        s = cell_text(v).strip()
        if is_pure_number(s):
            continue
        if parse_date_with_format(s, DateFormat.AUTO) is not None:
            hits += 1
    return hits


def score_numeric_column(rows: list[list[Any]], idx: int, sample: int = NUMERIC_RANK_SAMPLE_ROWS) -> int:
    """Count sampled cells that parse as a number (thousands separators stripped)."""
    return sum(1 for row in rows[:sample] if is_numeric_cell(_cell(row, idx)))


def _argmax(scores: list[int]) -> int:
    """Index of the highest score; ties go to the first column."""
    if not scores:
        return 0
    best = max(scores)
    return scores.index(best)


# ---------------------------------------------------------------------------
# Header overrides
# ---------------------------------------------------------------------------

def _header_match(header: Optional[list[str]], role: str) -> Optional[int]:
    """First header column whose name exactly matches a known alias for the role."""
    if not header:
        return None
    aliases = HEADER_ROLE_ALIASES[role]
    for idx, name in enumerate(header):
        if isinstance(name, str) and name.strip().lower() in aliases:
            return idx
    return None


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def column_scores(grid: RawGrid, sample: int = CLASSIFY_SAMPLE_ROWS) -> list[dict]:
    """Date and numeric score for every column over the first ``sample`` rows."""
    return [
        {
            "idx": idx,
            "name": name,
            "date_score": score_date_column(grid.rows, idx, sample),
            "numeric_score": score_numeric_column(grid.rows, idx, sample),
        }
        for idx, name in enumerate(grid.column_names())
    ]


def detect_columns(grid: RawGrid, sample: int = CLASSIFY_SAMPLE_ROWS) -> ColumnMapping:
    """Best-guess date, metric and category columns.

    Heuristic first (highest date score, highest numeric score, first other
    column), then exact header names override each role. Indices are always
    inside the grid; degenerate grids map everything to column 0.
    """
    width = grid.width
    if width == 0:
        return ColumnMapping(0, 0, 0)

    scores = column_scores(grid, sample)
    date_idx = _argmax([s["date_score"] for s in scores])
    metric_idx = _argmax([s["numeric_score"] for s in scores])
    category_idx = next((c for c in range(width) if c not in (date_idx, metric_idx)), 0)

    hdr_date = _header_match(grid.header, "date")
    hdr_metric = _header_match(grid.header, "metric")
    hdr_category = _header_match(grid.header, "category")

    return ColumnMapping(
        date_idx=hdr_date if hdr_date is not None else date_idx,
        metric_idx=hdr_metric if hdr_metric is not None else metric_idx,
        category_idx=hdr_category if hdr_category is not None else category_idx,
    )


def numeric_candidates(grid: RawGrid, sample: int = NUMERIC_RANK_SAMPLE_ROWS) -> list[int]:
    """Column indices ranked by numeric score, best first (stable on ties)."""
    ranked = sorted(
        range(grid.width),
        key=lambda idx: score_numeric_column(grid.rows, idx, sample),
        reverse=True,
    )
    return ranked


def column_samples(grid: RawGrid, idx: int, n: int = COLUMN_SAMPLE_SIZE) -> str:
    """Preview of a column's first cells, e.g. ``Cost: 10 · 5 · (empty)``."""
    if grid.is_empty:
        return "(no data)"
    sample = [_cell(row, idx) for row in grid.rows[:n]]
    formatted = " · ".join(EMPTY_GROUP if is_blank(v) else cell_text(v) for v in sample)
    names = grid.header or []
    prefix = f"{names[idx]}: " if idx < len(names) and names[idx] else ""
    return prefix + formatted
