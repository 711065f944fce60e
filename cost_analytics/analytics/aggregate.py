"""
Aggregation engine: filters, group-by reductions, top-N and cumulative series.

Every chart on the dashboard is one parameterized call into this module:

  pie   → aggregate_by_group   (dimension combination → value)
  bar   → aggregate_by_date    (date bucket → value), or group totals without a date
  line  → line_series          (top-N groups, or selected metrics, over time)
  area  → cumulative_by_date   (running total across sorted buckets)
"""
from __future__ import annotations

from typing import Any, Optional

import pandas as pd

from cost_analytics.data.cells import cell_text, parse_float_safe
from cost_analytics.data.dates import format_date_buckets
from cost_analytics.data.normalize import build_group_key, cell_at
from cost_analytics.data.schemas import Aggregation, FilterOperator, FilterRule, LineSeries, Selection
from cost_analytics.analytics.common import pct_of_total
from cost_analytics.errors import MappingIncomplete


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def matches_row(row: list[Any], rules: list[FilterRule]) -> bool:
    """True when the row satisfies every rule; an empty rule set passes everything."""
    for rule in rules:
        v = cell_text(cell_at(row, rule.column_idx))
        needle = rule.value
        op = FilterOperator(rule.operator)
        if op == FilterOperator.CONTAINS:
            if needle.lower() not in v.lower():
                return False
        elif op == FilterOperator.EQUALS:
            if v != needle:
                return False
        elif op == FilterOperator.NOT_CONTAINS:
            if needle.lower() in v.lower():
                return False
        elif op == FilterOperator.NOT_EQUALS:
            if v == needle:
                return False
    return True


def filter_rows(rows: list[list[Any]], rules: list[FilterRule]) -> list[list[Any]]:
    if not rules:
        return list(rows)
    return [r for r in rows if matches_row(r, rules)]


# ---------------------------------------------------------------------------
# Frame building & reduction
# ---------------------------------------------------------------------------

def _require_metric(selection: Selection) -> int:
    if selection.metric_idx is None:
        raise MappingIncomplete("No metric column selected")
    return selection.metric_idx


def _values(rows: list[list[Any]], metric_idx: int, aggregation: Aggregation) -> list[float]:
    """Per-row contribution: 1 for count, the lenient float otherwise."""
    if aggregation == Aggregation.COUNT:
        return [1.0] * len(rows)
    return [parse_float_safe(cell_at(r, metric_idx)) for r in rows]


def _buckets(rows: list[list[Any]], selection: Selection) -> list[str]:
    return format_date_buckets(
        [cell_at(r, selection.date_idx) for r in rows],
        selection.month_bucket,
        selection.date_format,
    )


def build_frame(rows: list[list[Any]], selection: Selection, metric_idx: Optional[int] = None) -> pd.DataFrame:
    """Filtered rows as a frame of ``group``, ``value`` and (when a date is selected) ``date``."""
    if metric_idx is None:
        metric_idx = _require_metric(selection)
    kept = filter_rows(rows, selection.filters)
    data = {
        "group": [build_group_key(r, selection.dims) for r in kept],
        "value": _values(kept, metric_idx, selection.aggregation),
    }
    if selection.date_idx is not None:
        data["date"] = _buckets(kept, selection)
    return pd.DataFrame(data, columns=list(data.keys()))


def reduce_frame(df: pd.DataFrame, keys: str | list[str], aggregation: Aggregation) -> pd.Series:
    """Reduce ``value`` per key: sum, row count, or mean."""
    grouped = df.groupby(keys, sort=False)["value"].agg(["sum", "size"])
    if aggregation == Aggregation.SUM:
        return grouped["sum"].astype(float)
    if aggregation == Aggregation.COUNT:
        return grouped["size"].astype(float)
    return (grouped["sum"] / grouped["size"]).fillna(0.0)


def _to_series_dict(reduced: pd.Series) -> dict[str, float]:
    return {str(k): float(v) for k, v in reduced.items()}


# ---------------------------------------------------------------------------
# Aggregated series
# ---------------------------------------------------------------------------

def aggregate_by_group(rows: list[list[Any]], selection: Selection) -> dict[str, float]:
    """One value per dimension combination (``All`` with no dimensions), first-seen order."""
    df = build_frame(rows, selection)
    if df.empty:
        return {}
    return _to_series_dict(reduce_frame(df, "group", selection.aggregation))


def aggregate_by_date(
    rows: list[list[Any]],
    selection: Selection,
    metric_idx: Optional[int] = None,
) -> dict[str, float]:
    """One value per date bucket, sorted by bucket string (chronological for zero-padded buckets)."""
    if selection.date_idx is None:
        raise ValueError("No date column selected")
    df = build_frame(rows, selection, metric_idx)
    if df.empty:
        return {}
    series = _to_series_dict(reduce_frame(df, "date", selection.aggregation))
    return dict(sorted(series.items()))


def top_n_groups(totals: dict[str, float], n: int) -> list[str]:
    """Keys of the ``n`` largest values (at least one); ties keep first-seen order."""
    n = max(1, int(n))
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [k for k, _ in ranked[:n]]


def cumulative(series: dict[str, float]) -> list[dict]:
    """Running total across buckets in lexicographic key order."""
    running = 0.0
    out = []
    for key in sorted(series):
        running += series[key]
        out.append({"date": key, "cumulative": running})
    return out


def cumulative_by_date(rows: list[list[Any]], selection: Selection) -> list[dict]:
    return cumulative(aggregate_by_date(rows, selection))


def _series_key(name: str, taken: set[str]) -> str:
    """Wide-row key for a series; ``date`` and repeated names become ``name (2)``, ``name (3)``..."""
    key, n = name, 2
    while key == "date" or key in taken:
        key = f"{name} ({n})"
        n += 1
    taken.add(key)
    return key


def line_series(rows: list[list[Any]], names: list[str], selection: Selection) -> LineSeries:
    """Multi-series line data.

    With dimensions selected: one series per group, restricted to the top-N
    groups by overall value. Without dimensions: one series per selected
    metric, named after its column.
    """
    if selection.date_idx is None:
        return LineSeries()

    if selection.dims:
        df = build_frame(rows, selection)
        if df.empty:
            return LineSeries()
        totals = _to_series_dict(reduce_frame(df, "group", selection.aggregation))
        groups = top_n_groups(totals, selection.top_n)
        wide = reduce_frame(df, ["date", "group"], selection.aggregation).unstack("group", fill_value=0.0)
        taken: set[str] = set()
        keys = [_series_key(g, taken) for g in groups]
        rows_wide = []
        for d in sorted(wide.index):
            record: dict[str, Any] = {"date": d}
            for g, key in zip(groups, keys):
                record[key] = float(wide.at[d, g])
            rows_wide.append(record)
        return LineSeries(rows_wide=rows_wide, series_keys=keys)

    if not selection.metric_idxs:
        return LineSeries()

    per_metric: dict[str, dict[str, float]] = {}
    taken = set()
    for m_idx in selection.metric_idxs:
        name = names[m_idx] if m_idx < len(names) else f"Column {m_idx}"
        per_metric[_series_key(name, taken)] = aggregate_by_date(rows, selection, m_idx)

    dates = sorted({d for series in per_metric.values() for d in series})
    rows_wide = [
        {"date": d, **{name: series.get(d, 0.0) for name, series in per_metric.items()}}
        for d in dates
    ]
    return LineSeries(rows_wide=rows_wide, series_keys=list(per_metric.keys()))


# ---------------------------------------------------------------------------
# Chart-shaped outputs
# ---------------------------------------------------------------------------

def pie_data(rows: list[list[Any]], selection: Selection) -> list[dict]:
    totals = aggregate_by_group(rows, selection)
    grand = sum(totals.values())
    return [
        {"group": g, "value": v, "pct": round(pct_of_total(v, grand), 2)}
        for g, v in totals.items()
    ]


def bar_data(rows: list[list[Any]], selection: Selection) -> list[dict]:
    """Per-bucket values when a date is selected, else the group totals."""
    if selection.date_idx is not None:
        return [{"date": d, "value": v} for d, v in aggregate_by_date(rows, selection).items()]
    return [{"group": g, "value": v} for g, v in aggregate_by_group(rows, selection).items()]


def area_data(rows: list[list[Any]], selection: Selection) -> list[dict]:
    if selection.date_idx is None:
        return []
    return cumulative_by_date(rows, selection)
