"""Workbook loading, column classification, date bucketing and the session store."""
from .loader import load_workbook, load_billing_result, split_header
from .classify import detect_columns, numeric_candidates
from .dates import format_date_bucket, format_date_buckets, parse_date_with_format
from .normalize import build_group_key, normalize_records
from .schemas import (
    Aggregation, ColumnMapping, DateFormat, FilterOperator, FilterRule,
    LoadState, NormalizedRecord, RawGrid, Selection,
)
from .store import AnalysisStore
