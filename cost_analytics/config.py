"""
Cloud Cost Analytics — Configuration: paths, constants, column aliases.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with COST_ANALYTICS_DATA_DIR env var for server deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("COST_ANALYTICS_DATA_DIR", str(Path.home() / "Cost Analytics")))
BASE_FOLDER = _data_dir
EXPORTS_FOLDER = _data_dir / "exports"

# ---------------------------------------------------------------------------
# Accepted workbook types (first sheet only)
# ---------------------------------------------------------------------------
WORKBOOK_EXTENSIONS = (".xlsx", ".xlsm", ".xls")

# ---------------------------------------------------------------------------
# Column classification
# ---------------------------------------------------------------------------
CLASSIFY_SAMPLE_ROWS = 10       # rows scored when guessing date/metric/category
NUMERIC_RANK_SAMPLE_ROWS = 50   # rows scored when ranking metric candidates
COLUMN_SAMPLE_SIZE = 5

# Exact (case-insensitive) header names that pin a column role.
# Order matters; first matching header column wins.
HEADER_ROLE_ALIASES = {
    "date": ["usagedate", "date", "billingdate", "usage date"],
    "metric": ["cost", "pretaxcost", "costinbillingcurrency", "totalcost"],
    "category": ["servicename", "service", "service name", "metercategory"],
}

# Billing-API query result column names → roles
BILLING_COLUMN_ALIASES = {
    "date": ["UsageDate", "Date"],
    "metric": ["Cost", "PreTaxCost"],
    "category": ["ServiceName"],
}

# ---------------------------------------------------------------------------
# Date bucketing
# ---------------------------------------------------------------------------
MONTH_ABBREVIATIONS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------
GROUP_SEPARATOR = " • "
EMPTY_GROUP = "(empty)"
ALL_GROUP = "All"
DEFAULT_TOP_N = 6
RECORD_PREVIEW_ROWS = 10

# ---------------------------------------------------------------------------
# Warning messages shown to the user
# ---------------------------------------------------------------------------
METRIC_REQUIRED_WARNING = "Select a metric column to aggregate."
