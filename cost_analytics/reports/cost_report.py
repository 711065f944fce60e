"""
Cost report: every chart series for the current session as JSON or a styled workbook.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

from cost_analytics.analytics.common import sanitize_for_json
from cost_analytics.data.normalize import records_to_dicts
from cost_analytics.data.store import AnalysisStore
from cost_analytics.excel.styles import SERIES_COLORS
from cost_analytics.excel.writer import ExcelWriter

CHART_KINDS = ("pie", "bar", "line", "area", "records")


def chart_rows(store: AnalysisStore, kind: str) -> list[dict]:
    """Flat rows for one chart (or the normalized records), ready for tabular export."""
    if kind == "pie":
        return store.pie()
    if kind == "bar":
        return store.bar()
    if kind == "line":
        return store.line().rows_wide
    if kind == "area":
        return store.area()
    if kind == "records":
        return records_to_dicts(store.records(limit=None))
    raise ValueError(f"Unknown chart kind: {kind}. Valid: {list(CHART_KINDS)}")


def _summary(store: AnalysisStore, charts: dict) -> dict:
    names = store.column_names()
    sel = store.selection
    return {
        "source": store.source_name,
        "rows": store.row_count(),
        "metric": names[sel.metric_idx] if sel.metric_idx is not None else None,
        "aggregation": sel.aggregation.value,
        "date_column": names[sel.date_idx] if sel.date_idx is not None else None,
        "bucket": "month" if sel.month_bucket else "day",
        "dimensions": [names[i] for i in sel.dims],
        "total": sum(p["value"] for p in charts["pie"]),
        "groups": len(charts["pie"]),
        "buckets": len(charts["area"]),
    }


def generate_json(store: AnalysisStore) -> dict:
    """Selection, mapping, all chart series and warnings in one JSON-safe dict."""
    charts = store.charts()
    return sanitize_for_json({
        "summary": _summary(store, charts),
        "columns": store.column_names(),
        "mapping": store.mapping.to_dict() if store.mapping else None,
        "selection": store.selection.to_dict(),
        "charts": charts,
        "warnings": charts["warnings"],
    })


def _build_workbook(store: AnalysisStore) -> ExcelWriter:
    charts = store.charts()
    summary = _summary(store, charts)
    value_type = "number" if store.selection.aggregation.value == "count" else "decimal"

    xw = ExcelWriter()

    ws = xw.add_sheet("Summary")
    subtitle = f"{summary['source'] or 'Cost data'} | generated {datetime.now():%Y-%m-%d %H:%M}"
    row = xw.write_title(ws, "Cost Analytics Report", subtitle)
    row = xw.write_kpi_row(ws, row, [
        (summary["total"], f"{summary['aggregation'].upper()} of {summary['metric'] or '-'}", value_type),
        (summary["rows"], "Rows", "number"),
        (summary["groups"], "Groups", "number"),
        (summary["buckets"], f"{summary['bucket'].title()} buckets", "number"),
    ])
    row = xw.write_warnings(ws, row, charts["warnings"])
    row = xw.write_section(ws, row, "Selection")
    xw.write_table(ws, row, [("setting", "text", "Setting"), ("value", "text", "Value")], [
        {"setting": "Metric", "value": summary["metric"] or "(none)"},
        {"setting": "Aggregation", "value": summary["aggregation"]},
        {"setting": "Date column", "value": summary["date_column"] or "(none)"},
        {"setting": "Bucket", "value": summary["bucket"]},
        {"setting": "Dimensions", "value": ", ".join(summary["dimensions"]) or "All"},
    ], freeze=False)

    ws = xw.add_sheet("By Group")
    row = xw.write_section(ws, 1, "Totals by group")
    xw.write_table(
        ws, row,
        [("group", "text", "Group"), ("value", value_type, "Value"), ("pct", "percent", "% of Total")],
        sorted(charts["pie"], key=lambda p: p["value"], reverse=True),
        swatch_fn=lambda i, _: SERIES_COLORS[i % len(SERIES_COLORS)],
        show_total=True,
    )

    if charts["area"]:
        ws = xw.add_sheet("By Date")
        row = xw.write_section(ws, 1, "Totals by date bucket")
        by_date = {b["date"]: b["value"] for b in charts["bar"]}
        xw.write_table(
            ws, row,
            [("date", "text", "Bucket"), ("value", value_type, "Value"), ("cumulative", value_type, "Cumulative")],
            [{"date": a["date"], "value": by_date.get(a["date"], 0.0), "cumulative": a["cumulative"]} for a in charts["area"]],
        )

    if charts["line"]["rows"]:
        ws = xw.add_sheet("Trend")
        row = xw.write_section(ws, 1, "Series over time")
        cols = [("date", "text", "Bucket")] + [(k, value_type, k) for k in charts["line"]["series"]]
        xw.write_table(ws, row, cols, charts["line"]["rows"])

    return xw


def generate_excel(store: AnalysisStore, output_path: str | Path) -> Path:
    """Write the styled report workbook to ``output_path``."""
    return _build_workbook(store).save(output_path)
