"""Tests for workbook decoding and billing payload mapping."""

from datetime import datetime

import pytest

from cost_analytics.data.loader import (
    load_billing_result, load_workbook, read_workbook, split_header,
)
from cost_analytics.errors import ParseFailure

from conftest import write_workbook


class TestSplitHeader:
    """Tests for first-row header detection."""

    def test_text_first_row_is_header(self):
        grid = split_header([["Date", "Cost"], ["2024-01-05", 10]])
        assert grid.header_detected
        assert grid.header == ["Date", "Cost"]
        assert grid.rows == [["2024-01-05", 10]]

    def test_numeric_first_row_is_data(self):
        grid = split_header([["2024-01-05", 10], ["2024-01-06", 11]])
        assert not grid.header_detected
        assert grid.header is None
        assert len(grid.rows) == 2
        assert grid.column_names() == ["Column 0", "Column 1"]

    def test_blank_header_cells_get_positional_names(self):
        grid = split_header([["Date", None, "Cost"], ["2024-01-05", "x", 3]])
        assert grid.header == ["Date", "Column 1", "Cost"]

    def test_header_covers_widest_row(self):
        grid = split_header([["Date"], ["2024-01-05", 3]])
        assert grid.header == ["Date", "Column 1"]
        assert grid.width == 2

    def test_empty(self):
        grid = split_header([])
        assert grid.is_empty
        assert grid.width == 0


class TestReadWorkbook:
    """Tests for decoding the first sheet."""

    def test_header_and_typed_cells(self, cost_xlsx):
        grid = load_workbook(cost_xlsx)
        assert grid.header_detected
        assert grid.header == ["UsageDate", "ServiceName", "Cost", "Region"]
        assert len(grid.rows) == 5
        assert grid.rows[0][1] == "Virtual Machines"
        assert float(grid.rows[0][2]) == 120.5
        assert grid.rows[0][0].year == 2024

    def test_empty_cells_become_none(self, cost_xlsx):
        grid = load_workbook(cost_xlsx)
        assert grid.rows[3][3] is None

    def test_headerless_workbook(self, headerless_xlsx):
        grid = load_workbook(headerless_xlsx)
        assert not grid.header_detected
        assert len(grid.rows) == 3

    def test_bytes_source(self, cost_xlsx):
        grid = load_workbook(cost_xlsx.read_bytes())
        assert len(grid.rows) == 5

    def test_blank_rows_dropped(self, tmp_path):
        path = write_workbook(tmp_path / "gaps.xlsx", [
            ["Date", "Cost"], [datetime(2024, 1, 1), 1], [None, None], [datetime(2024, 1, 2), 2],
        ])
        assert len(load_workbook(path).rows) == 2

    def test_only_first_sheet(self, tmp_path):
        from openpyxl import Workbook
        wb = Workbook()
        wb.active.append(["Cost"])
        wb.active.append([1])
        other = wb.create_sheet("Other")
        other.append(["Ignored"])
        path = tmp_path / "two.xlsx"
        wb.save(path)
        assert load_workbook(path).header == ["Cost"]

    def test_corrupt_bytes_raise_parse_failure(self):
        with pytest.raises(ParseFailure):
            read_workbook(b"this is not a workbook")

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "costs.csv"
        path.write_text("a,b\n1,2\n")
        with pytest.raises(ParseFailure, match="Unsupported file type"):
            read_workbook(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseFailure, match="File not found"):
            read_workbook(tmp_path / "missing.xlsx")


class TestBillingResult:
    """Tests for mapping billing query results by column name."""

    PAYLOAD = {
        "columns": [
            {"name": "PreTaxCost", "type": "Number"},
            {"name": "UsageDate", "type": "Number"},
            {"name": "ServiceName", "type": "String"},
            {"name": "Currency", "type": "String"},
        ],
        "rows": [
            [12.5, 20240105, "Storage", "USD"],
            [3.25, 20240210, "Bandwidth", "USD"],
        ],
    }

    def test_roles_mapped_by_name(self):
        grid, mapping = load_billing_result(self.PAYLOAD)
        assert grid.header == ["PreTaxCost", "UsageDate", "ServiceName", "Currency"]
        assert (mapping.date_idx, mapping.metric_idx, mapping.category_idx) == (1, 0, 2)
        assert len(grid.rows) == 2

    def test_nested_under_properties(self):
        grid, mapping = load_billing_result({"properties": self.PAYLOAD})
        assert mapping.metric_idx == 0
        assert grid.width == 4

    def test_missing_roles_fall_back_to_first_column(self):
        grid, mapping = load_billing_result({"columns": [{"name": "Amount"}], "rows": [[1]]})
        assert (mapping.date_idx, mapping.metric_idx, mapping.category_idx) == (0, 0, 0)

    def test_malformed_payloads(self):
        with pytest.raises(ParseFailure):
            load_billing_result({"rows": []})
        with pytest.raises(ParseFailure):
            load_billing_result({"columns": [{"type": "Number"}], "rows": []})
        with pytest.raises(ParseFailure):
            load_billing_result({"columns": [{"name": "Cost"}], "rows": ["not a row"]})
        with pytest.raises(ParseFailure):
            load_billing_result(["columns"])
