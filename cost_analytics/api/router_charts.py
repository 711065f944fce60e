"""
Chart endpoints: selection state and the four aggregated series.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from cost_analytics.data.store import AnalysisStore
from cost_analytics.analytics.common import sanitize_for_json
from cost_analytics.api.dependencies import get_store
from cost_analytics.api.response_models import ChartsResponse, SelectionModel
from cost_analytics.reports.cost_report import CHART_KINDS, chart_rows

router = APIRouter(prefix="/api", tags=["charts"])


def _safe_json(data) -> JSONResponse:
    return JSONResponse(content=sanitize_for_json(data))


@router.get("/selection")
def get_selection(store: AnalysisStore = Depends(get_store)):
    return store.selection.to_dict()


@router.put("/selection")
def update_selection(req: SelectionModel, store: AnalysisStore = Depends(get_store)):
    """Replace metric, aggregation, date, dimension, top-N and filter choices."""
    try:
        selection = store.update_selection(req.to_selection())
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return selection.to_dict()


@router.get("/charts", response_model=ChartsResponse)
def all_charts(store: AnalysisStore = Depends(get_store)):
    """Pie, bar, line and area series for the current selection, plus warnings."""
    return sanitize_for_json(store.charts())


@router.get("/charts/{kind}")
def one_chart(kind: str, store: AnalysisStore = Depends(get_store)):
    if kind not in CHART_KINDS:
        raise HTTPException(404, f"Unknown chart kind: {kind}. Valid: {list(CHART_KINDS)}")
    rows = chart_rows(store, kind)
    return _safe_json({"kind": kind, "rows": rows, "warnings": list(store.warnings)})
