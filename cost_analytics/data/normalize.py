"""
Row normalization: group keys and NormalizedRecord building.
"""
from __future__ import annotations

from typing import Any

from cost_analytics.config import ALL_GROUP, EMPTY_GROUP, GROUP_SEPARATOR
from cost_analytics.data.cells import cell_text, is_blank, parse_float_safe
from cost_analytics.data.dates import format_date_buckets
from cost_analytics.data.schemas import ColumnMapping, DateFormat, NormalizedRecord, RawGrid


def cell_at(row: list[Any], idx: int) -> Any:
    """Cell value, or None when the row is shorter than ``idx``."""
    return row[idx] if 0 <= idx < len(row) else None


# ---------------------------------------------------------------------------
# Group keys
# ---------------------------------------------------------------------------

def build_group_key(row: list[Any], dims: list[int]) -> str:
    """Join the row's dimension values; blanks read as ``(empty)``.

    No dimensions collapses every row into the single ``All`` group.
    """
    if not dims:
        return ALL_GROUP
    parts = []
    for idx in dims:
        v = cell_at(row, idx)
        parts.append(EMPTY_GROUP if is_blank(v) else cell_text(v))
    return GROUP_SEPARATOR.join(parts)


# ---------------------------------------------------------------------------
# NormalizedRecord
# ---------------------------------------------------------------------------

def normalize_row(
    row: list[Any],
    mapping: ColumnMapping,
    names: list[str],
    date: str,
) -> NormalizedRecord:
    """Reduce one grid row to its already-computed bucket, metric value and category."""
    roles = {mapping.date_idx, mapping.metric_idx, mapping.category_idx}
    extra = {
        name: cell_at(row, idx)
        for idx, name in enumerate(names)
        if idx not in roles
    }
    return NormalizedRecord(
        date=date,
        metric_value=parse_float_safe(cell_at(row, mapping.metric_idx)),
        category=cell_text(cell_at(row, mapping.category_idx)),
        extra=extra,
    )


def normalize_records(
    grid: RawGrid,
    mapping: ColumnMapping,
    month_bucket: bool = True,
    date_format: DateFormat = DateFormat.AUTO,
) -> list[NormalizedRecord]:
    """Build a fresh record list for the whole grid (records are never edited in place)."""
    mapping.validate(grid.width)
    names = grid.column_names()
    dates = format_date_buckets(
        [cell_at(row, mapping.date_idx) for row in grid.rows], month_bucket, date_format,
    )
    return [normalize_row(row, mapping, names, d) for row, d in zip(grid.rows, dates)]


def records_to_dicts(records: list[NormalizedRecord]) -> list[dict]:
    """Flatten records for JSON / delimited output (extra fields after the core three)."""
    out = []
    for r in records:
        d = {"date": r.date, "metric_value": r.metric_value, "category": r.category}
        for k, v in r.extra.items():
            d.setdefault(k, v)
        out.append(d)
    return out
