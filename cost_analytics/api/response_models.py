"""
Pydantic request/response schemas for the API.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from cost_analytics.config import DEFAULT_TOP_N
from cost_analytics.data.schemas import (
    Aggregation, ColumnMapping, DateFormat, FilterOperator, FilterRule, Selection,
)


class HealthResponse(BaseModel):
    status: str
    state: str
    source: Optional[str]
    rows: int
    columns: int
    warnings: list[str]


class LoadResponse(BaseModel):
    status: str
    state: str
    rows: int
    header: list[str]
    header_detected: bool
    mapping: Optional[dict[str, int]]
    selection: dict[str, Any]
    warnings: list[str]


class ColumnInfo(BaseModel):
    idx: int
    name: str
    date_score: int
    numeric_score: int
    sample: str
    recommended_metric: bool


class ColumnsResponse(BaseModel):
    columns: list[ColumnInfo]
    mapping: Optional[dict[str, int]]


class MappingModel(BaseModel):
    date_idx: int = Field(ge=0)
    metric_idx: int = Field(ge=0)
    category_idx: int = Field(ge=0)

    def to_mapping(self) -> ColumnMapping:
        return ColumnMapping(self.date_idx, self.metric_idx, self.category_idx)


class FilterRuleModel(BaseModel):
    column_idx: int = Field(ge=0)
    operator: FilterOperator = FilterOperator.CONTAINS
    value: str = ""


class SelectionModel(BaseModel):
    metric_idx: Optional[int] = Field(default=None, ge=0)
    metric_idxs: list[int] = []
    aggregation: Aggregation = Aggregation.SUM
    date_idx: Optional[int] = Field(default=None, ge=0)
    date_format: DateFormat = DateFormat.AUTO
    month_bucket: bool = True
    dims: list[int] = []
    top_n: int = Field(default=DEFAULT_TOP_N, ge=1)
    filters: list[FilterRuleModel] = []

    def to_selection(self) -> Selection:
        return Selection(
            metric_idx=self.metric_idx,
            metric_idxs=list(self.metric_idxs),
            aggregation=self.aggregation,
            date_idx=self.date_idx,
            date_format=self.date_format,
            month_bucket=self.month_bucket,
            dims=list(self.dims),
            top_n=self.top_n,
            filters=[FilterRule(f.column_idx, f.operator, f.value) for f in self.filters],
        )


class ChartsResponse(BaseModel):
    pie: list[dict[str, Any]]
    bar: list[dict[str, Any]]
    line: dict[str, Any]
    area: list[dict[str, Any]]
    warnings: list[str]
