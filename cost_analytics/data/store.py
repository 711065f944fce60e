"""
AnalysisStore: one in-memory analysis session.

Holds the decoded grid, the guessed column mapping, the user's selections and
the warning list. Every chart is recomputed from the current grid and
selection on request; nothing is cached between calls.

Load cycle:  IDLE → DECODING → LOADED | FAILED
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from cost_analytics.config import METRIC_REQUIRED_WARNING, RECORD_PREVIEW_ROWS
from cost_analytics.data.classify import (
    column_samples, column_scores, detect_columns, numeric_candidates,
)
from cost_analytics.data.loader import WorkbookSource, load_billing_result, load_workbook
from cost_analytics.data.normalize import normalize_records
from cost_analytics.data.schemas import (
    ColumnMapping, LineSeries, LoadState, NormalizedRecord, RawGrid, Selection,
)
from cost_analytics.errors import MappingIncomplete, ParseFailure
from cost_analytics.analytics import aggregate


class AnalysisStore:
    """In-memory cost grid with selection-driven chart accessors."""

    def __init__(self) -> None:
        self.grid: RawGrid = RawGrid()
        self.mapping: Optional[ColumnMapping] = None
        self.selection: Selection = Selection()
        self.warnings: list[str] = []
        self.state: LoadState = LoadState.IDLE
        self.source_name: Optional[str] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, source: WorkbookSource, name: Optional[str] = None) -> "AnalysisStore":
        """Decode a workbook and start a fresh analysis.

        On failure the previous grid and selections stay as they were and a
        warning is appended.
        """
        self.state = LoadState.DECODING
        label = name or (str(source) if not isinstance(source, (bytes, bytearray)) else "upload")
        print(f"Loading workbook {label}...")
        try:
            grid = load_workbook(source)
        except ParseFailure as exc:
            self.state = LoadState.FAILED
            self.warnings.append(str(exc))
            print(f"  Warning: {exc}")
            return self

        self._set_grid(grid, detect_columns(grid), label)
        return self

    def load_billing(self, payload: dict, name: str = "billing query") -> "AnalysisStore":
        """Start a fresh analysis from a billing-API query result."""
        self.state = LoadState.DECODING
        print(f"Loading {name}...")
        try:
            grid, mapping = load_billing_result(payload)
        except ParseFailure as exc:
            self.state = LoadState.FAILED
            self.warnings.append(str(exc))
            print(f"  Warning: {exc}")
            return self

        self._set_grid(grid, mapping, name, trust_mapping=True)
        return self

    def _set_grid(self, grid: RawGrid, mapping: ColumnMapping, label: str, trust_mapping: bool = False) -> None:
        self.grid = grid
        self.mapping = mapping
        self.source_name = label
        self.warnings = []
        self.selection = self._default_selection(trust_mapping)
        self.state = LoadState.LOADED
        header = "header detected" if grid.header_detected else "no header"
        print(f"  {len(grid.rows):,} rows × {grid.width} columns ({header})")
        print(f"  Guessed columns: date={mapping.date_idx} metric={mapping.metric_idx} category={mapping.category_idx}")

    def _default_selection(self, trust_mapping: bool = False) -> Selection:
        """Fresh selections.

        Billing payloads are mapped by column name and applied as-is; a guessed
        workbook mapping is applied only where the sampled data backs it.
        """
        if self.mapping is None or self.grid.is_empty:
            return Selection()
        m = self.mapping
        if trust_mapping:
            return Selection(metric_idx=m.metric_idx, date_idx=m.date_idx)
        scores = column_scores(self.grid)
        return Selection(
            metric_idx=m.metric_idx if scores[m.metric_idx]["numeric_score"] > 0 else None,
            date_idx=m.date_idx if scores[m.date_idx]["date_score"] > 0 else None,
        )

    def reset(self) -> "AnalysisStore":
        """Discard everything and go back to IDLE."""
        self.__init__()
        return self

    @property
    def is_loaded(self) -> bool:
        """True once any grid has loaded (a later failed load keeps it)."""
        return self.mapping is not None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def set_mapping(self, mapping: ColumnMapping) -> ColumnMapping:
        """Override the guessed column roles (validated against the grid width).

        The mapped metric and date become the charts' primary metric and date
        column; other selected metrics, dimensions and filters are kept.
        """
        self.mapping = mapping.validate(self.grid.width)
        sel = self.selection
        others = [i for i in sel.metric_idxs if i not in (sel.metric_idx, mapping.metric_idx)]
        self.selection = replace(
            sel,
            metric_idx=mapping.metric_idx,
            metric_idxs=[mapping.metric_idx, *others],
            date_idx=mapping.date_idx,
        )
        self._clear_metric_warning()
        return self.mapping

    def update_selection(self, selection: Selection) -> Selection:
        """Replace the current selection wholesale after validating column indices.

        The mapping follows the selected metric and date column so that
        records and charts read the same columns.
        """
        self.selection = selection.validate(self.grid.width)
        if self.mapping is not None:
            self.mapping = replace(
                self.mapping,
                metric_idx=self.mapping.metric_idx if selection.metric_idx is None else selection.metric_idx,
                date_idx=self.mapping.date_idx if selection.date_idx is None else selection.date_idx,
            )
        self._clear_metric_warning()
        return self.selection

    def _clear_metric_warning(self) -> None:
        if self.selection.metric_idx is not None and METRIC_REQUIRED_WARNING in self.warnings:
            self.warnings.remove(METRIC_REQUIRED_WARNING)

    # ------------------------------------------------------------------
    # Metadata queries
    # ------------------------------------------------------------------

    def column_names(self) -> list[str]:
        return self.grid.column_names()

    def columns(self) -> list[dict]:
        """Per-column name, scores and sample preview."""
        recommended = numeric_candidates(self.grid)[:1]
        out = []
        for s in column_scores(self.grid):
            out.append({
                **s,
                "sample": column_samples(self.grid, s["idx"]),
                "recommended_metric": s["idx"] in recommended,
            })
        return out

    def row_count(self) -> int:
        return len(self.grid.rows)

    def records(self, limit: Optional[int] = RECORD_PREVIEW_ROWS) -> list[NormalizedRecord]:
        """Normalized records under the current mapping and date settings."""
        if self.mapping is None:
            return []
        records = normalize_records(
            self.grid, self.mapping, self.selection.month_bucket, self.selection.date_format,
        )
        return records if limit is None else records[:limit]

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    def _guarded(self, fn, empty):
        """Run a chart computation; a missing metric becomes a warning, not an error."""
        try:
            return fn()
        except MappingIncomplete:
            if METRIC_REQUIRED_WARNING not in self.warnings:
                self.warnings.append(METRIC_REQUIRED_WARNING)
            return empty

    def pie(self) -> list[dict]:
        return self._guarded(lambda: aggregate.pie_data(self.grid.rows, self.selection), [])

    def bar(self) -> list[dict]:
        return self._guarded(lambda: aggregate.bar_data(self.grid.rows, self.selection), [])

    def line(self) -> LineSeries:
        return self._guarded(
            lambda: aggregate.line_series(self.grid.rows, self.column_names(), self.selection),
            LineSeries(),
        )

    def area(self) -> list[dict]:
        return self._guarded(lambda: aggregate.area_data(self.grid.rows, self.selection), [])

    def charts(self) -> dict[str, Any]:
        """All four chart series plus the current warnings."""
        line = self.line()
        return {
            "pie": self.pie(),
            "bar": self.bar(),
            "line": {"rows": line.rows_wide, "series": line.series_keys},
            "area": self.area(),
            "warnings": list(self.warnings),
        }
