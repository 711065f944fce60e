"""Shared fixtures: small cost grids and workbooks written with openpyxl."""

import os
import tempfile
from datetime import datetime

# Keep exports out of the home directory while the suite runs
os.environ.setdefault("COST_ANALYTICS_DATA_DIR", tempfile.mkdtemp(prefix="cost-analytics-tests-"))

import pytest
from openpyxl import Workbook

from cost_analytics.data.schemas import RawGrid


EXAMPLE_ROWS = [
    ["2024-01-05", "10", "VM"],
    ["2024-01-20", "5", "VM"],
    ["2024-02-01", "7", "Storage"],
]

HEADER = ["UsageDate", "ServiceName", "Cost", "Region"]

COST_ROWS = [
    [datetime(2024, 1, 3), "Virtual Machines", 120.5, "eastus"],
    [datetime(2024, 1, 17), "Storage", 30.0, "westeurope"],
    [datetime(2024, 2, 2), "Virtual Machines", 99.5, "eastus"],
    [datetime(2024, 2, 9), "Bandwidth", 4.0, None],
    [datetime(2024, 3, 1), "Storage", 12.0, "eastus"],
]


def write_workbook(path, rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


@pytest.fixture
def example_rows():
    return [list(r) for r in EXAMPLE_ROWS]


@pytest.fixture
def example_grid():
    """Headerless three-row grid: date, cost, service."""
    return RawGrid(rows=[list(r) for r in EXAMPLE_ROWS])


@pytest.fixture
def cost_grid():
    """Headered grid with string dates, the way a billing export often looks."""
    rows = [[r[0].strftime("%Y-%m-%d"), r[1], r[2], r[3]] for r in COST_ROWS]
    return RawGrid(rows=rows, header=list(HEADER), header_detected=True)


@pytest.fixture
def cost_xlsx(tmp_path):
    """Workbook with a header row, real date cells and float costs."""
    return write_workbook(tmp_path / "costs.xlsx", [HEADER] + COST_ROWS)


@pytest.fixture
def headerless_xlsx(tmp_path):
    """Example rows with real numeric costs, so the first row is data."""
    rows = [[d, float(v), s] for d, v, s in EXAMPLE_ROWS]
    return write_workbook(tmp_path / "plain.xlsx", rows)
