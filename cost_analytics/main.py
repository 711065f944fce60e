"""
Cloud Cost Analytics — FastAPI app factory.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cost_analytics import __version__
from cost_analytics.data.store import AnalysisStore
from cost_analytics.api.dependencies import set_store
from cost_analytics.api.router_meta import router as meta_router
from cost_analytics.api.router_upload import router as upload_router
from cost_analytics.api.router_charts import router as charts_router
from cost_analytics.api.router_export import router as export_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the empty analysis session."""
    from cost_analytics.config import EXPORTS_FOLDER
    EXPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
    print(f"  EXPORTS_FOLDER = {EXPORTS_FOLDER}")

    set_store(AnalysisStore())
    print("\nCloud Cost Analytics ready. Upload a workbook or post a billing query result.\n")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cloud Cost Analytics API",
        description="Spreadsheet cost analytics: column detection, date buckets, grouped aggregations, exports",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(upload_router)
    app.include_router(charts_router)
    app.include_router(export_router)
    return app


app = create_app()
