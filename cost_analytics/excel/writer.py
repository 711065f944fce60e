"""
ExcelWriter: builder for styled cost workbooks.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from cost_analytics.excel.styles import TITLE_FONT, SUBTITLE_FONT, SECTION_FONT, WARNING_FONT
from cost_analytics.excel.formatters import (
    format_header_row,
    format_data_cell,
    auto_column_width,
    add_kpi_card,
)


ColSpec = tuple[str, str, str]  # (key, col_type, label)


class ExcelWriter:
    """Fluent builder for styled Excel workbooks."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._first_sheet = True

    def add_sheet(self, title: str) -> Worksheet:
        """New worksheet; the workbook's default sheet is reused for the first call."""
        # sheet titles are limited to 31 characters and may not contain []:*?/\
        safe = "".join("_" if ch in '[]:*?/\\' else ch for ch in title)[:31] or "Sheet"
        if self._first_sheet:
            ws = self.wb.active
            ws.title = safe
            self._first_sheet = False
        else:
            ws = self.wb.create_sheet(title=safe)
        return ws

    def write_title(self, ws: Worksheet, title: str, subtitle: str, merge_cols: int = 6) -> int:
        """Title and subtitle rows. Returns the next free row."""
        ws.cell(row=1, column=1).value = title
        ws.cell(row=1, column=1).font = TITLE_FONT
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=merge_cols)

        ws.cell(row=2, column=1).value = subtitle
        ws.cell(row=2, column=1).font = SUBTITLE_FONT
        ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=merge_cols)

        for col in range(1, merge_cols + 1):
            ws.column_dimensions[get_column_letter(col)].width = 18
        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        ws.cell(row=row, column=1).value = title
        ws.cell(row=row, column=1).font = SECTION_FONT
        return row + 2

    def write_kpi_row(self, ws: Worksheet, row: int, kpis: list[tuple], col_spacing: int = 2) -> int:
        """Row of KPI cards from ``(value, label, col_type)`` tuples. Returns the next free row."""
        col = 1
        for value, label, col_type in kpis:
            add_kpi_card(ws, row, col, value, label, col_type)
            col += col_spacing
        return row + 3

    def write_warnings(self, ws: Worksheet, row: int, warnings: list[str]) -> int:
        for w in warnings:
            ws.cell(row=row, column=1).value = w
            ws.cell(row=row, column=1).font = WARNING_FONT
            row += 1
        return row + 1 if warnings else row

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[ColSpec],
        data: list[dict] | pd.DataFrame,
        swatch_fn=None,
        freeze: bool = True,
        show_total: bool = False,
        total_label: str = "TOTAL",
    ) -> int:
        """Header row plus one row per record, optionally followed by a total row.

        swatch_fn(row_idx, row_data) -> hex color or None, applied to the first column.

        Returns the row after the last one written.
        """
        for col_num, (_, _, label) in enumerate(columns, 1):
            ws.cell(row=start_row, column=col_num).value = label
        format_header_row(ws, start_row, len(columns))

        rows = data.to_dict("records") if isinstance(data, pd.DataFrame) else data

        row = start_row + 1
        for idx, row_data in enumerate(rows):
            swatch = swatch_fn(idx, row_data) if swatch_fn else None
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                val = row_data.get(key, 0 if col_type != "text" else "")
                if pd.isna(val):
                    val = 0
                format_data_cell(ws, row, col_num, val, col_type, swatch=swatch if col_num == 1 else None)
            row += 1

        if show_total and rows:
            format_data_cell(ws, row, 1, total_label, "text", is_total=True)
            for col_num, (key, col_type, _) in enumerate(columns[1:], 2):
                if col_type in ("currency", "number", "decimal"):
                    total = float(sum(r.get(key, 0) or 0 for r in rows))
                    format_data_cell(ws, row, col_num, total, col_type, is_total=True)
                else:
                    format_data_cell(ws, row, col_num, "", "text", is_total=True)
            row += 1

        auto_column_width(ws)
        if freeze:
            ws.freeze_panes = f"A{start_row + 1}"
        return row

    def save(self, path: str | Path) -> Path:
        """Save the workbook to disk, creating parent folders."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
