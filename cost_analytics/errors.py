"""
Error kinds raised by the loading and aggregation pipeline.

Both are non-fatal: callers surface them as warning strings and keep going.
"""
from __future__ import annotations


class CostAnalyticsError(Exception):
    """Base class for every pipeline error."""


class ParseFailure(CostAnalyticsError):
    """A workbook or billing payload could not be decoded into a grid."""


class MappingIncomplete(CostAnalyticsError):
    """An aggregation was requested before a metric column was chosen."""
