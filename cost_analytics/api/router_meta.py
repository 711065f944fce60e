"""
Meta endpoints: health, columns, mapping, normalized records.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from cost_analytics.config import RECORD_PREVIEW_ROWS
from cost_analytics.data.normalize import records_to_dicts
from cost_analytics.data.store import AnalysisStore
from cost_analytics.analytics.common import sanitize_for_json
from cost_analytics.api.dependencies import get_store, get_store_or_empty
from cost_analytics.api.response_models import (
    ColumnsResponse, HealthResponse, MappingModel,
)

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: AnalysisStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok",
        state=store.state.value,
        source=store.source_name,
        rows=store.row_count(),
        columns=store.grid.width,
        warnings=list(store.warnings),
    )


@router.get("/columns", response_model=ColumnsResponse)
def list_columns(store: AnalysisStore = Depends(get_store)):
    """Column names, date/numeric scores, sample values and the guessed mapping."""
    return ColumnsResponse(
        columns=store.columns(),
        mapping=store.mapping.to_dict() if store.mapping else None,
    )


@router.put("/mapping")
def update_mapping(req: MappingModel, store: AnalysisStore = Depends(get_store)):
    """Override the guessed date/metric/category columns.

    The charts follow: the mapped metric and date replace the selection's.
    """
    try:
        mapping = store.set_mapping(req.to_mapping())
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return {"mapping": mapping.to_dict(), "selection": store.selection.to_dict()}


@router.get("/records")
def list_records(
    limit: int = Query(RECORD_PREVIEW_ROWS, ge=1, description="Rows to return"),
    store: AnalysisStore = Depends(get_store),
):
    """Normalized records (date bucket, metric value, category, extra fields)."""
    try:
        records = store.records(limit=limit)
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return sanitize_for_json({"records": records_to_dicts(records), "total_rows": store.row_count()})
