"""Tests for comma-separated chart export."""

from cost_analytics.reports.delimited import to_csv


class TestToCsv:
    """Tests for to_csv."""

    def test_header_and_rows(self):
        rows = [{"group": "VM", "value": 15.0}, {"group": "Storage", "value": 7.5}]
        assert to_csv(rows) == "group,value\nVM,15\nStorage,7.5"

    def test_empty(self):
        assert to_csv([]) == ""

    def test_columns_from_first_row(self):
        rows = [{"a": 1, "b": 2}, {"a": 3, "c": 9}]
        assert to_csv(rows) == "a,b\n1,2\n3,"

    def test_values_are_not_quoted(self):
        """Embedded commas are written as-is."""
        assert to_csv([{"service": "VM, premium"}]) == "service\nVM, premium"

    def test_blank_values(self):
        assert to_csv([{"region": None}]) == "region\n"
