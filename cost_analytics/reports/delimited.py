"""
Comma-separated export of aggregated tables.

Values are written as-is: a value that itself contains a comma or newline is
not quoted or escaped, so such tables will not round-trip through a CSV reader.
"""
from __future__ import annotations

from typing import Any

from cost_analytics.data.cells import cell_text

SEPARATOR = ","


def to_csv(rows: list[dict[str, Any]]) -> str:
    """Header from the first row's keys, then one line per row; missing values are blank."""
    if not rows:
        return ""
    keys = list(rows[0].keys())
    lines = [SEPARATOR.join(keys)]
    for r in rows:
        lines.append(SEPARATOR.join(cell_text(r.get(k)) for k in keys))
    return "\n".join(lines)
