"""
FastAPI dependencies: AnalysisStore singleton.
"""
from __future__ import annotations

from fastapi import HTTPException

from cost_analytics.data.store import AnalysisStore

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: AnalysisStore | None = None


def set_store(store: AnalysisStore) -> None:
    global _store
    _store = store


def get_store_or_empty() -> AnalysisStore:
    """Return the store even if nothing has been loaded (upload/reset/health)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


def get_store() -> AnalysisStore:
    """Return the store once a grid has been loaded."""
    store = get_store_or_empty()
    if not store.is_loaded:
        raise HTTPException(409, "No cost data loaded yet. Upload a workbook first.")
    return store
