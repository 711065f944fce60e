"""
Cell coercion: text form, blank detection, lenient float parsing.
"""
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any

# Leading numeric prefix, same leniency as a browser's parseFloat: "12.5 USD" → 12.5
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and empty strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return value == ""
    try:
        # NaT and numpy NaN compare unequal to themselves
        return value != value
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> str:
    """String form of a cell; blanks become "" and whole floats drop the ".0"."""
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dt.datetime):
        if value.time() == dt.time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, dt.date):
        return value.isoformat()
    return str(value)


def parse_float_safe(value: Any) -> float:
    """Parse a cell as a float after stripping thousands separators.

    Unparseable cells are 0.0, so a non-numeric metric cell never raises.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)) and not is_blank(value):
        v = float(value)
        return v if math.isfinite(v) else 0.0
    m = _FLOAT_PREFIX_RE.match(cell_text(value).strip().replace(",", ""))
    if not m:
        return 0.0
    v = float(m.group(0))
    return v if math.isfinite(v) else 0.0


def is_numeric_cell(value: Any) -> bool:
    """True when the whole cell reads as a number once thousands separators are removed."""
    if isinstance(value, bool) or is_blank(value):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return is_pure_number(cell_text(value).replace(",", ""))


def is_pure_number(text: str) -> bool:
    """True when the whole string is a number (used to keep "2024" out of date scoring)."""
    try:
        v = float(text.strip())
    except ValueError:
        return False
    return math.isfinite(v)
