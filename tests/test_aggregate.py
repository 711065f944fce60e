"""Tests for the aggregation engine - filters, reductions, top-N and cumulative series."""

import pytest

from cost_analytics.analytics.aggregate import (
    aggregate_by_date, aggregate_by_group, area_data, bar_data, cumulative,
    filter_rows, line_series, pie_data, top_n_groups,
)
from cost_analytics.data.schemas import Aggregation, FilterOperator, FilterRule, Selection
from cost_analytics.errors import MappingIncomplete

NAMES = ["Column 0", "Column 1", "Column 2"]


class TestFilters:
    """Tests for row filter rules."""

    def test_equals_keeps_matching_rows(self, example_rows):
        kept = filter_rows(example_rows, [FilterRule(2, FilterOperator.EQUALS, "VM")])
        assert kept == example_rows[:2]

    def test_contains_is_case_insensitive(self, example_rows):
        kept = filter_rows(example_rows, [FilterRule(2, FilterOperator.CONTAINS, "stor")])
        assert kept == example_rows[2:]

    def test_negated_operators(self, example_rows):
        assert len(filter_rows(example_rows, [FilterRule(2, FilterOperator.NOT_CONTAINS, "vm")])) == 1
        assert len(filter_rows(example_rows, [FilterRule(2, FilterOperator.NOT_EQUALS, "VM")])) == 1

    def test_equals_is_exact(self, example_rows):
        assert filter_rows(example_rows, [FilterRule(2, FilterOperator.EQUALS, "vm")]) == []

    def test_rules_are_anded(self, example_rows):
        rules = [
            FilterRule(2, FilterOperator.EQUALS, "VM"),
            FilterRule(0, FilterOperator.CONTAINS, "01-20"),
        ]
        assert filter_rows(example_rows, rules) == [example_rows[1]]

    def test_no_rules_keeps_everything(self, example_rows):
        assert filter_rows(example_rows, []) == example_rows

    def test_operator_given_as_string(self, example_rows):
        assert len(filter_rows(example_rows, [FilterRule(2, "notEquals", "Storage")])) == 2


class TestAggregateByDate:
    """Tests for per-bucket reductions."""

    def test_monthly_sum(self, example_rows):
        sel = Selection(metric_idx=1, date_idx=0)
        assert aggregate_by_date(example_rows, sel) == {"2024-01": 15, "2024-02": 7}

    def test_daily_buckets(self, example_rows):
        sel = Selection(metric_idx=1, date_idx=0, month_bucket=False)
        assert list(aggregate_by_date(example_rows, sel)) == ["2024-01-05", "2024-01-20", "2024-02-01"]

    def test_keys_sorted(self):
        rows = [["2024-03-01", "1"], ["2023-12-01", "2"], ["2024-01-01", "3"]]
        sel = Selection(metric_idx=1, date_idx=0)
        assert list(aggregate_by_date(rows, sel)) == ["2023-12", "2024-01", "2024-03"]

    def test_requires_date(self, example_rows):
        with pytest.raises(ValueError):
            aggregate_by_date(example_rows, Selection(metric_idx=1))

    def test_filters_applied(self, example_rows):
        sel = Selection(metric_idx=1, date_idx=0, filters=[FilterRule(2, FilterOperator.EQUALS, "Storage")])
        assert aggregate_by_date(example_rows, sel) == {"2024-02": 7}


class TestAggregateByGroup:
    """Tests for per-group reductions."""

    def test_count_by_category(self, example_rows):
        sel = Selection(metric_idx=1, aggregation=Aggregation.COUNT, dims=[2])
        assert aggregate_by_group(example_rows, sel) == {"VM": 2, "Storage": 1}

    def test_avg_by_category(self, example_rows):
        sel = Selection(metric_idx=1, aggregation="avg", dims=[2])
        assert aggregate_by_group(example_rows, sel) == {"VM": 7.5, "Storage": 7.0}

    def test_no_dims_is_single_all_group(self, example_rows):
        assert aggregate_by_group(example_rows, Selection(metric_idx=1)) == {"All": 22.0}

    def test_first_seen_order(self):
        rows = [["b", "1"], ["a", "2"], ["b", "3"]]
        assert list(aggregate_by_group(rows, Selection(metric_idx=1, dims=[0]))) == ["b", "a"]

    def test_non_numeric_metric_counts_as_zero(self, example_rows):
        example_rows[0][1] = "n/a"
        sel = Selection(metric_idx=1, dims=[2])
        assert aggregate_by_group(example_rows, sel) == {"VM": 5.0, "Storage": 7.0}

    def test_thousands_separators(self):
        rows = [["VM", "1,200.50"], ["VM", "99.5"]]
        assert aggregate_by_group(rows, Selection(metric_idx=1, dims=[0])) == {"VM": 1300.0}

    def test_sum_matches_date_totals(self, example_rows):
        sel = Selection(metric_idx=1, date_idx=0, dims=[2])
        assert sum(aggregate_by_group(example_rows, sel).values()) == sum(aggregate_by_date(example_rows, sel).values())

    def test_missing_metric_raises(self, example_rows):
        with pytest.raises(MappingIncomplete):
            aggregate_by_group(example_rows, Selection(dims=[2]))

    def test_everything_filtered_out(self, example_rows):
        sel = Selection(metric_idx=1, filters=[FilterRule(2, FilterOperator.EQUALS, "Network")])
        assert aggregate_by_group(example_rows, sel) == {}


class TestTopNAndCumulative:
    """Tests for ranking and running totals."""

    def test_top_n(self):
        totals = {"a": 1.0, "b": 5.0, "c": 3.0}
        assert top_n_groups(totals, 2) == ["b", "c"]

    def test_top_n_ties_keep_first_seen(self):
        assert top_n_groups({"a": 3.0, "b": 3.0, "c": 1.0}, 1) == ["a"]

    def test_top_n_at_least_one(self):
        assert top_n_groups({"a": 1.0, "b": 2.0}, 0) == ["b"]

    def test_top_n_larger_than_groups(self):
        assert top_n_groups({"a": 1.0}, 6) == ["a"]

    def test_cumulative_running_total(self):
        series = {"2024-02": 7.0, "2024-01": 15.0, "2024-03": 1.0}
        assert cumulative(series) == [
            {"date": "2024-01", "cumulative": 15.0},
            {"date": "2024-02", "cumulative": 22.0},
            {"date": "2024-03", "cumulative": 23.0},
        ]

    def test_cumulative_monotone_for_non_negative(self, cost_grid):
        sel = Selection(metric_idx=2, date_idx=0)
        values = [p["cumulative"] for p in area_data(cost_grid.rows, sel)]
        assert values == sorted(values)
        assert values[-1] == pytest.approx(266.0)


class TestLineSeries:
    """Tests for multi-series line data."""

    def test_top_groups_over_time(self, example_rows):
        sel = Selection(metric_idx=1, date_idx=0, dims=[2], top_n=1)
        line = line_series(example_rows, NAMES, sel)
        assert line.series_keys == ["VM"]
        assert line.rows_wide == [
            {"date": "2024-01", "VM": 15.0},
            {"date": "2024-02", "VM": 0.0},
        ]

    def test_all_groups(self, example_rows):
        sel = Selection(metric_idx=1, date_idx=0, dims=[2])
        line = line_series(example_rows, NAMES, sel)
        assert line.series_keys == ["VM", "Storage"]
        assert line.rows_wide[1] == {"date": "2024-02", "VM": 0.0, "Storage": 7.0}

    def test_one_series_per_metric(self, cost_grid):
        cost_grid.rows[0].append("3")
        names = cost_grid.header + ["Units"]
        sel = Selection(metric_idx=2, metric_idxs=[4], date_idx=0)
        line = line_series(cost_grid.rows, names, sel)
        assert line.series_keys == ["Units", "Cost"]
        assert line.rows_wide[0] == {"date": "2024-01", "Units": 3.0, "Cost": 150.5}

    def test_group_named_date_keeps_the_bucket(self):
        """A group value ``date`` must not overwrite the row's date bucket."""
        rows = [["2024-01-05", "10", "date"], ["2024-01-20", "5", "VM"]]
        line = line_series(rows, NAMES, Selection(metric_idx=1, date_idx=0, dims=[2]))
        assert line.series_keys == ["date (2)", "VM"]
        assert line.rows_wide == [{"date": "2024-01", "date (2)": 10.0, "VM": 5.0}]

    def test_metric_column_named_date(self):
        rows = [["2024-01-05", "10", "4"], ["2024-02-01", "5", "6"]]
        names = ["UsageDate", "date", "date"]
        line = line_series(rows, names, Selection(metric_idx=1, metric_idxs=[2], date_idx=0))
        assert line.series_keys == ["date (2)", "date (3)"]
        assert line.rows_wide[0] == {"date": "2024-01", "date (2)": 4.0, "date (3)": 10.0}
        assert [r["date"] for r in line.rows_wide] == ["2024-01", "2024-02"]

    def test_no_date_is_empty(self, example_rows):
        line = line_series(example_rows, NAMES, Selection(metric_idx=1, dims=[2]))
        assert line.rows_wide == []
        assert line.series_keys == []


class TestChartShapes:
    """Tests for chart-shaped outputs."""

    def test_pie_percentages(self, example_rows):
        pie = pie_data(example_rows, Selection(metric_idx=1, dims=[2]))
        assert [p["group"] for p in pie] == ["VM", "Storage"]
        assert pie[0]["pct"] == pytest.approx(68.18)
        assert sum(p["pct"] for p in pie) == pytest.approx(100.0)

    def test_pie_with_zero_total(self):
        pie = pie_data([["VM", "0"]], Selection(metric_idx=1, dims=[0]))
        assert pie == [{"group": "VM", "value": 0.0, "pct": 0.0}]

    def test_bar_by_date(self, example_rows):
        bar = bar_data(example_rows, Selection(metric_idx=1, date_idx=0))
        assert bar == [{"date": "2024-01", "value": 15.0}, {"date": "2024-02", "value": 7.0}]

    def test_bar_without_date_uses_groups(self, example_rows):
        bar = bar_data(example_rows, Selection(metric_idx=1, dims=[2]))
        assert bar == [{"group": "VM", "value": 15.0}, {"group": "Storage", "value": 7.0}]

    def test_area_without_date_is_empty(self, example_rows):
        assert area_data(example_rows, Selection(metric_idx=1)) == []
