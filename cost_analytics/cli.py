#!/usr/bin/env python3
"""
Cloud Cost Analytics CLI — summaries, exports and the API server.

USAGE:
  cost-analytics summary costs.xlsx                          # Guessed metric/date, monthly sums
  cost-analytics summary costs.xlsx --dims ServiceName --top 5
  cost-analytics summary costs.xlsx --metric Cost --agg avg --day
  cost-analytics summary costs.xlsx --filter "ServiceName:contains:storage"

  cost-analytics export costs.xlsx                           # Report workbook + CSVs
  cost-analytics export costs.xlsx --output ./out

  cost-analytics serve                                       # Start API server
  cost-analytics serve --port 8000

Columns may be given by zero-based index or by header name.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from cost_analytics.config import DEFAULT_TOP_N, EXPORTS_FOLDER
from cost_analytics.data.schemas import (
    Aggregation, DateFormat, FilterOperator, FilterRule, LoadState, Selection,
)
from cost_analytics.data.store import AnalysisStore
from cost_analytics.reports import cost_report
from cost_analytics.reports.delimited import to_csv


def _column_ref(ref: str, names: list[str]) -> int:
    """Resolve a column given as an index or a (case-insensitive) header name."""
    ref = ref.strip()
    if ref.isdigit():
        return int(ref)
    for idx, name in enumerate(names):
        if name.lower() == ref.lower():
            return idx
    raise ValueError(f"Unknown column: '{ref}'. Columns: {names}")


def _parse_filter(text: str, names: list[str]) -> FilterRule:
    """``COLUMN:OP:VALUE`` (the value may itself contain colons)."""
    parts = text.split(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Filter must look like COLUMN:OP:VALUE (got '{text}')")
    col, op, value = parts
    return FilterRule(_column_ref(col, names), FilterOperator(op), value)


def _build_selection(args, store: AnalysisStore) -> Selection:
    """Start from the guessed selection and apply any command-line overrides."""
    names = store.column_names()
    current = store.selection

    metric_idx = current.metric_idx
    if args.metric:
        metric_idx = _column_ref(args.metric, names)
    metric_idxs = [_column_ref(m, names) for m in args.metrics] if args.metrics else []

    date_idx = current.date_idx
    if args.date:
        date_idx = _column_ref(args.date, names)

    return Selection(
        metric_idx=metric_idx,
        metric_idxs=metric_idxs,
        aggregation=Aggregation(args.agg),
        date_idx=date_idx,
        date_format=DateFormat(args.format),
        month_bucket=not args.day,
        dims=[_column_ref(d, names) for d in args.dims],
        top_n=args.top,
        filters=[_parse_filter(f, names) for f in args.filter],
    )


def _load(args) -> AnalysisStore:
    store = AnalysisStore().load(Path(args.file))
    if store.state != LoadState.LOADED:
        raise RuntimeError(store.warnings[-1] if store.warnings else f"Could not load {args.file}")
    store.update_selection(_build_selection(args, store))
    return store


def cmd_summary(args):
    """Print the grouped, dated and cumulative totals for one workbook."""
    print("\n" + "=" * 70)
    print("  CLOUD COST ANALYTICS — SUMMARY")
    print("=" * 70)

    store = _load(args)
    data = cost_report.generate_json(store)
    s = data["summary"]

    print(f"\n  Source:      {s['source']}")
    print(f"  Rows:        {s['rows']:,}")
    print(f"  Metric:      {s['metric'] or '(none)'}  ({s['aggregation']})")
    print(f"  Date column: {s['date_column'] or '(none)'}  (by {s['bucket']})")
    print(f"  Dimensions:  {', '.join(s['dimensions']) or 'All'}")

    for w in data["warnings"]:
        print(f"\n  Warning: {w}")

    charts = data["charts"]
    if charts["pie"]:
        print(f"\nBY GROUP ({len(charts['pie'])}):\n")
        for i, p in enumerate(sorted(charts["pie"], key=lambda p: p["value"], reverse=True), 1):
            print(f"{i:<4}{p['group'][:40]:<42}{p['value']:>14,.2f}{p['pct']:>8.1f}%")

    if charts["area"]:
        by_date = {b["date"]: b["value"] for b in charts["bar"]}
        print(f"\nBY DATE ({len(charts['area'])} buckets):\n")
        for a in charts["area"]:
            print(f"    {a['date']:<14}{by_date.get(a['date'], 0.0):>14,.2f}{a['cumulative']:>16,.2f}")

    if charts["line"]["series"]:
        print(f"\nTREND SERIES: {', '.join(charts['line']['series'])}")

    print(f"\n  Total: {s['total']:,.2f}\n")


def cmd_export(args):
    """Write the report workbook, a JSON dump and one CSV per chart."""
    print("\n" + "=" * 70)
    print("  CLOUD COST ANALYTICS — EXPORT")
    print("=" * 70)

    store = _load(args)
    out_dir = Path(args.output) if args.output else EXPORTS_FOLDER
    out_dir.mkdir(parents=True, exist_ok=True)

    path = cost_report.generate_excel(store, out_dir / "Cost_Report.xlsx")
    print(f"\n   {path.name}")

    json_path = out_dir / "cost_report.json"
    json_path.write_text(json.dumps(cost_report.generate_json(store), indent=2))
    print(f"   {json_path.name}")

    for kind in cost_report.CHART_KINDS:
        csv_path = out_dir / f"{kind}.csv"
        csv_path.write_text(to_csv(cost_report.chart_rows(store, kind)))
        print(f"   {csv_path.name}")

    print(f"\n  Done: {out_dir}\n")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Cloud Cost Analytics API on port {args.port}...")
    uvicorn.run("cost_analytics.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def _add_selection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", help="Workbook to analyse (.xlsx, .xlsm, .xls)")
    p.add_argument("--metric", help="Metric column (default: guessed)")
    p.add_argument("--metrics", nargs="*", default=[], help="Extra metric columns for the trend series")
    p.add_argument("--date", help="Date column (default: guessed)")
    p.add_argument("--dims", nargs="*", default=[], help="Group-by columns")
    p.add_argument("--agg", choices=[a.value for a in Aggregation], default="sum", help="Aggregation")
    p.add_argument("--format", choices=[f.value for f in DateFormat], default="auto", help="Date format")
    p.add_argument("--day", action="store_true", help="Bucket by day instead of month")
    p.add_argument("--top", type=int, default=DEFAULT_TOP_N, help=f"Top N groups in the trend (default {DEFAULT_TOP_N})")
    p.add_argument("--filter", action="append", default=[], metavar="COL:OP:VALUE",
                   help="Row filter; OP is contains, equals, notContains or notEquals")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Cloud Cost Analytics — spreadsheet cost analytics engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    summary_parser = subparsers.add_parser("summary", help="Print totals for a workbook")
    _add_selection_args(summary_parser)
    summary_parser.set_defaults(func=cmd_summary)

    export_parser = subparsers.add_parser("export", help="Write report workbook, JSON and CSVs")
    _add_selection_args(export_parser)
    export_parser.add_argument("--output", help="Output directory (default: exports folder)")
    export_parser.set_defaults(func=cmd_export)

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except RuntimeError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
