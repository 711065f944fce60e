"""
Export endpoints: chart tables as CSV, full report as a styled workbook.
"""
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, Response

from cost_analytics.config import EXPORTS_FOLDER
from cost_analytics.data.store import AnalysisStore
from cost_analytics.api.dependencies import get_store
from cost_analytics.reports import cost_report
from cost_analytics.reports.delimited import to_csv

router = APIRouter(prefix="/api/export", tags=["export"])


def _output_path(name: str) -> Path:
    EXPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
    return EXPORTS_FOLDER / name


@router.get("/report.xlsx")
def report_excel(store: AnalysisStore = Depends(get_store)):
    path = cost_report.generate_excel(store, _output_path("Cost_Report.xlsx"))
    return FileResponse(path=str(path), filename=path.name,
                        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")


@router.get("/{kind}.csv")
def chart_csv(kind: str, store: AnalysisStore = Depends(get_store)):
    """One chart table (pie, bar, line, area) or the normalized records as CSV."""
    if kind not in cost_report.CHART_KINDS:
        raise HTTPException(404, f"Unknown chart kind: {kind}. Valid: {list(cost_report.CHART_KINDS)}")
    return Response(
        content=to_csv(cost_report.chart_rows(store, kind)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{kind}.csv"'},
    )
