"""Tests for the in-memory analysis session."""

import pytest

from cost_analytics.config import METRIC_REQUIRED_WARNING
from cost_analytics.data.schemas import Aggregation, ColumnMapping, LoadState, Selection
from cost_analytics.data.store import AnalysisStore

from conftest import write_workbook


@pytest.fixture
def store(cost_xlsx):
    return AnalysisStore().load(cost_xlsx)


class TestLoading:
    """Tests for the load cycle and default selections."""

    def test_starts_idle(self):
        store = AnalysisStore()
        assert store.state == LoadState.IDLE
        assert not store.is_loaded
        assert store.row_count() == 0

    def test_load_guesses_mapping_and_selection(self, store):
        assert store.state == LoadState.LOADED
        assert store.source_name.endswith("costs.xlsx")
        assert store.mapping.to_dict() == {"date_idx": 0, "metric_idx": 2, "category_idx": 1}
        assert store.selection.metric_idx == 2
        assert store.selection.date_idx == 0
        assert store.selection.dims == []
        assert store.warnings == []

    def test_headerless_workbook(self, headerless_xlsx):
        store = AnalysisStore().load(headerless_xlsx)
        assert store.mapping.to_dict() == {"date_idx": 0, "metric_idx": 1, "category_idx": 2}
        assert store.column_names() == ["Column 0", "Column 1", "Column 2"]

    def test_failed_load_keeps_previous_grid(self, store):
        store.update_selection(Selection(metric_idx=2, date_idx=0, dims=[1]))
        store.load(b"not a workbook", name="broken.xlsx")
        assert store.state == LoadState.FAILED
        assert store.row_count() == 5
        assert store.selection.dims == [1]
        assert store.warnings[-1].startswith("Failed to parse Excel file")

    def test_failed_first_load(self):
        store = AnalysisStore().load(b"garbage")
        assert store.state == LoadState.FAILED
        assert not store.is_loaded
        assert len(store.warnings) == 1

    def test_new_load_resets_selection_and_warnings(self, store, headerless_xlsx):
        store.update_selection(Selection(metric_idx=2, dims=[1], aggregation=Aggregation.AVG))
        store.load(b"garbage")
        store.load(headerless_xlsx)
        assert store.state == LoadState.LOADED
        assert store.selection.dims == []
        assert store.selection.aggregation == Aggregation.SUM
        assert store.warnings == []

    def test_text_only_grid_has_no_metric(self, tmp_path):
        path = write_workbook(tmp_path / "text.xlsx", [["Service", "Region"], ["VM", "eastus"]])
        store = AnalysisStore().load(path)
        assert store.state == LoadState.LOADED
        assert store.selection.metric_idx is None

    def test_billing_payload(self):
        payload = {
            "properties": {
                "columns": [{"name": "Cost"}, {"name": "UsageDate"}, {"name": "ServiceName"}],
                "rows": [[1.5, 20240105, "VM"], [2.5, 20240212, "VM"]],
            }
        }
        store = AnalysisStore().load_billing(payload)
        assert store.state == LoadState.LOADED
        assert store.selection.metric_idx == 0
        assert store.selection.date_idx == 1
        assert store.pie() == [{"group": "All", "value": 4.0, "pct": 100.0}]

    def test_reset(self, store):
        store.reset()
        assert store.state == LoadState.IDLE
        assert store.mapping is None
        assert store.row_count() == 0


class TestSelection:
    """Tests for mapping and selection updates."""

    def test_out_of_range_selection_rejected(self, store):
        with pytest.raises(ValueError):
            store.update_selection(Selection(metric_idx=9))
        assert store.selection.metric_idx == 2

    def test_out_of_range_mapping_rejected(self, store):
        with pytest.raises(ValueError):
            store.set_mapping(ColumnMapping(0, 4, 1))

    def test_mapping_drives_the_charts(self, store):
        """Remapping the metric column changes what the pie and bar sum."""
        assert store.pie()[0]["value"] == pytest.approx(266.0)
        store.set_mapping(ColumnMapping(0, 3, 1))
        assert store.selection.metric_idx == 3
        assert store.selection.metric_idxs == [3]
        assert store.selection.date_idx == 0
        assert store.pie() == [{"group": "All", "value": 0.0, "pct": 0.0}]
        assert [b["value"] for b in store.bar()] == [0.0, 0.0, 0.0]

    def test_mapping_keeps_other_selection_choices(self, store):
        store.update_selection(Selection(metric_idx=2, metric_idxs=[2, 3], date_idx=0, dims=[1]))
        store.set_mapping(ColumnMapping(0, 3, 1))
        assert store.selection.metric_idxs == [3, 2]
        assert store.selection.dims == [1]

    def test_mapping_clears_metric_warning(self, tmp_path):
        path = write_workbook(tmp_path / "text.xlsx", [["Service", "Spend"], ["VM", "n/a"], ["Disk", "3"]])
        store = AnalysisStore().load(path)
        store.update_selection(Selection())
        store.charts()
        assert METRIC_REQUIRED_WARNING in store.warnings
        store.set_mapping(ColumnMapping(0, 1, 0))
        assert METRIC_REQUIRED_WARNING not in store.warnings

    def test_selection_drives_the_records(self, store):
        """Records and charts read the same metric after a selection change."""
        store.update_selection(Selection(metric_idx=3, date_idx=0))
        assert store.mapping.metric_idx == 3
        assert [r.metric_value for r in store.records()] == [0.0] * 5
        assert store.mapping.category_idx == 1

    def test_metric_warning_added_once_and_cleared(self, store):
        store.update_selection(Selection(date_idx=0))
        charts = store.charts()
        assert charts["pie"] == []
        assert charts["bar"] == []
        assert charts["area"] == []
        assert store.warnings.count(METRIC_REQUIRED_WARNING) == 1

        store.update_selection(Selection(metric_idx=2, date_idx=0))
        assert METRIC_REQUIRED_WARNING not in store.warnings
        assert store.charts()["warnings"] == []


class TestQueries:
    """Tests for column metadata, records and charts."""

    def test_columns(self, store):
        cols = store.columns()
        assert [c["name"] for c in cols] == ["UsageDate", "ServiceName", "Cost", "Region"]
        assert [c["recommended_metric"] for c in cols] == [False, False, True, False]
        assert cols[0]["date_score"] == 5
        assert cols[2]["numeric_score"] == 5

    def test_records(self, store):
        records = store.records(limit=2)
        assert len(records) == 2
        assert records[0].date == "2024-01"
        assert records[0].category == "Virtual Machines"
        assert len(store.records(limit=None)) == 5

    def test_charts_recomputed_from_selection(self, store):
        store.update_selection(Selection(metric_idx=2, date_idx=0, dims=[1], top_n=2))
        charts = store.charts()
        assert [p["group"] for p in charts["pie"]] == ["Virtual Machines", "Storage", "Bandwidth"]
        assert [b["date"] for b in charts["bar"]] == ["2024-01", "2024-02", "2024-03"]
        assert charts["line"]["series"] == ["Virtual Machines", "Storage"]
        assert charts["area"][-1]["cumulative"] == pytest.approx(266.0)
