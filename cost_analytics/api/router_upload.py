"""
Load endpoints: workbook upload, billing query result, reset.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile

from cost_analytics.config import WORKBOOK_EXTENSIONS
from cost_analytics.data.schemas import LoadState
from cost_analytics.data.store import AnalysisStore
from cost_analytics.api.dependencies import get_store_or_empty
from cost_analytics.api.response_models import LoadResponse

router = APIRouter(prefix="/api", tags=["upload"])


def _load_response(store: AnalysisStore) -> LoadResponse:
    return LoadResponse(
        status="loaded" if store.state == LoadState.LOADED else "failed",
        state=store.state.value,
        rows=store.row_count(),
        header=store.column_names(),
        header_detected=store.grid.header_detected,
        mapping=store.mapping.to_dict() if store.mapping else None,
        selection=store.selection.to_dict(),
        warnings=list(store.warnings),
    )


@router.post("/upload", response_model=LoadResponse)
def upload_workbook(
    file: UploadFile = File(...),
    store: AnalysisStore = Depends(get_store_or_empty),
):
    """Decode a workbook (first sheet) and start a new analysis.

    A file that can't be decoded leaves the previous analysis in place and
    comes back with ``status: failed`` and a warning. Runs in the worker
    threadpool; decoding a large workbook blocks for seconds.
    """
    if not file.filename:
        raise HTTPException(400, "Missing filename")
    suffix = Path(file.filename).suffix.lower()
    if suffix not in WORKBOOK_EXTENSIONS:
        raise HTTPException(400, f"Only {', '.join(WORKBOOK_EXTENSIONS)} files are accepted (got '{file.filename}')")

    content = file.file.read()
    store.load(content, name=file.filename)
    return _load_response(store)


@router.post("/billing", response_model=LoadResponse)
def load_billing(
    payload: dict[str, Any] = Body(...),
    store: AnalysisStore = Depends(get_store_or_empty),
):
    """Start a new analysis from a billing query result (``columns`` + ``rows``)."""
    store.load_billing(payload)
    return _load_response(store)


@router.post("/reset")
def reset(store: AnalysisStore = Depends(get_store_or_empty)):
    """Discard the current analysis."""
    store.reset()
    return {"status": "reset", "state": store.state.value}
