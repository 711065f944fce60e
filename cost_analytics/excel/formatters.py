"""
Cell and row formatting helpers for cost workbooks.
"""
from __future__ import annotations

from openpyxl.styles import PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from cost_analytics.excel.styles import (
    HEADER_FONT, HEADER_FILL, HEADER_BORDER,
    DATA_FONT, TOTAL_FONT, THIN_BORDER, TOTAL_BORDER,
    ALTERNATE_FILL, TOTAL_FILL, KPI_FILL,
    KPI_VALUE_FONT, KPI_LABEL_FONT,
    CENTER, LEFT, RIGHT, NUMBER_FORMATS,
)


def format_header_row(ws: Worksheet, row_num: int, num_cols: int) -> None:
    """Style a header row across ``num_cols`` columns."""
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=row_num, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
        cell.border = HEADER_BORDER


def format_data_cell(
    ws: Worksheet,
    row_num: int,
    col_num: int,
    value,
    col_type: str = "text",
    is_total: bool = False,
    swatch: str | None = None,
) -> None:
    """Write one value with font, border, number format and zebra striping."""
    cell = ws.cell(row=row_num, column=col_num)
    cell.value = value
    cell.font = TOTAL_FONT if is_total else DATA_FONT
    cell.border = TOTAL_BORDER if is_total else THIN_BORDER
    cell.alignment = RIGHT if col_type in NUMBER_FORMATS else LEFT
    if col_type in NUMBER_FORMATS:
        cell.number_format = NUMBER_FORMATS[col_type]

    if swatch:
        cell.fill = PatternFill(start_color=swatch, end_color=swatch, fill_type="solid")
    elif is_total:
        cell.fill = TOTAL_FILL
    elif row_num % 2 == 0:
        cell.fill = ALTERNATE_FILL


def auto_column_width(ws: Worksheet, min_width: int = 10, max_width: int = 50) -> None:
    """Fit each column to its longest rendered value, within bounds."""
    for column in ws.columns:
        letter = get_column_letter(column[0].column)
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        ws.column_dimensions[letter].width = min(max(longest + 2, min_width), max_width)


def add_kpi_card(ws: Worksheet, row: int, col: int, value, label: str, col_type: str = "number") -> None:
    """Big value over a small label."""
    cell = ws.cell(row=row, column=col)
    cell.value = value
    cell.font = KPI_VALUE_FONT
    cell.fill = KPI_FILL
    cell.alignment = CENTER
    if col_type in NUMBER_FORMATS:
        cell.number_format = NUMBER_FORMATS[col_type]

    lbl = ws.cell(row=row + 1, column=col)
    lbl.value = label
    lbl.font = KPI_LABEL_FONT
    lbl.alignment = CENTER
