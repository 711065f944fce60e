"""
Grid, mapping, filter and selection schemas shared by every pipeline stage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from cost_analytics.config import DEFAULT_TOP_N


class Aggregation(str, Enum):
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"


class DateFormat(str, Enum):
    AUTO = "auto"
    ISO = "YYYY-MM-DD"
    US = "MM/DD/YYYY"
    EU = "DD/MM/YYYY"
    ISO_SLASH = "YYYY/MM/DD"
    DAY_MONTH_NAME = "DD-MMM-YYYY"


class FilterOperator(str, Enum):
    CONTAINS = "contains"
    EQUALS = "equals"
    NOT_CONTAINS = "notContains"
    NOT_EQUALS = "notEquals"


class LoadState(str, Enum):
    IDLE = "idle"
    DECODING = "decoding"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class RawGrid:
    """Rectangular-ish cell grid decoded from the first sheet of a workbook."""
    rows: list[list[Any]] = field(default_factory=list)
    header: Optional[list[str]] = None
    header_detected: bool = False

    @property
    def width(self) -> int:
        if self.header is not None:
            return len(self.header)
        return max((len(r) for r in self.rows), default=0)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def column_names(self) -> list[str]:
        """Header names, or synthetic ``Column N`` names when there is no header."""
        if self.header is not None:
            return list(self.header)
        return [f"Column {i}" for i in range(self.width)]


@dataclass
class ColumnMapping:
    """Column indices for the date, metric and category roles.

    The same column may be mapped to more than one role.
    """
    date_idx: int = 0
    metric_idx: int = 0
    category_idx: int = 0

    def validate(self, width: int) -> "ColumnMapping":
        for role, idx in (("date", self.date_idx), ("metric", self.metric_idx), ("category", self.category_idx)):
            if not 0 <= idx < max(width, 1):
                raise ValueError(f"{role} column {idx} is outside the grid (width {width})")
        return self

    def to_dict(self) -> dict:
        return {"date_idx": self.date_idx, "metric_idx": self.metric_idx, "category_idx": self.category_idx}


@dataclass(frozen=True)
class FilterRule:
    column_idx: int
    operator: FilterOperator = FilterOperator.CONTAINS
    value: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", FilterOperator(self.operator))


@dataclass(frozen=True)
class NormalizedRecord:
    """One grid row reduced to bucket, metric value and category."""
    date: str
    metric_value: float
    category: str
    extra: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)


@dataclass
class Selection:
    """Every downstream choice the user makes after a grid is loaded."""
    metric_idx: Optional[int] = None        # primary metric (pie/bar/area)
    metric_idxs: list[int] = field(default_factory=list)
    aggregation: Aggregation = Aggregation.SUM
    date_idx: Optional[int] = None
    date_format: DateFormat = DateFormat.AUTO
    month_bucket: bool = True
    dims: list[int] = field(default_factory=list)
    top_n: int = DEFAULT_TOP_N
    filters: list[FilterRule] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.aggregation = Aggregation(self.aggregation)
        self.date_format = DateFormat(self.date_format)
        self.top_n = max(1, int(self.top_n))
        # the primary metric is always part of the metric set
        if self.metric_idx is not None and self.metric_idx not in self.metric_idxs:
            self.metric_idxs = [*self.metric_idxs, self.metric_idx]
        if self.metric_idx is None and self.metric_idxs:
            self.metric_idx = self.metric_idxs[0]

    def validate(self, width: int) -> "Selection":
        """Raise ValueError when any referenced column is outside the grid."""
        indices = [*self.metric_idxs, *self.dims, *(r.column_idx for r in self.filters)]
        if self.date_idx is not None:
            indices.append(self.date_idx)
        for idx in indices:
            if not 0 <= idx < width:
                raise ValueError(f"Column {idx} is outside the grid (width {width})")
        return self

    def to_dict(self) -> dict:
        return {
            "metric_idx": self.metric_idx,
            "metric_idxs": list(self.metric_idxs),
            "aggregation": self.aggregation.value,
            "date_idx": self.date_idx,
            "date_format": self.date_format.value,
            "month_bucket": self.month_bucket,
            "dims": list(self.dims),
            "top_n": self.top_n,
            "filters": [
                {"column_idx": r.column_idx, "operator": r.operator.value, "value": r.value}
                for r in self.filters
            ],
        }


@dataclass
class LineSeries:
    """Wide rows for a multi-series line chart."""
    rows_wide: list[dict[str, Any]] = field(default_factory=list)
    series_keys: list[str] = field(default_factory=list)
