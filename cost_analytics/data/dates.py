"""
Date parsing and day/month bucketing.

Buckets are always zero-padded (``YYYY-MM`` / ``YYYY-MM-DD``) so that a plain
string sort is also a chronological sort.
"""
from __future__ import annotations

import datetime as dt
import re
import warnings
from typing import Any, Optional

import pandas as pd

from cost_analytics.config import MONTH_ABBREVIATIONS
from cost_analytics.data.cells import cell_text, is_blank
from cost_analytics.data.schemas import DateFormat


# ---------------------------------------------------------------------------
# Fixed-format patterns: four-digit years only, fields read literally
# ---------------------------------------------------------------------------

_FIXED_PATTERNS: dict[DateFormat, re.Pattern] = {
    DateFormat.ISO: re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"),
    DateFormat.US: re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    DateFormat.EU: re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    DateFormat.ISO_SLASH: re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"),
    DateFormat.DAY_MONTH_NAME: re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{4})$"),
}

# Fallback for unparseable text: leading "YYYY-M" or "YYYY/M"
_YEAR_MONTH_PREFIX_RE = re.compile(r"^(\d{4})[-/](\d{1,2})")


# Auto parsing requires a four-digit year in the text ("May", "t2", "today" stay text)
_FOUR_DIGIT_YEAR_RE = re.compile(r"\d{4}")


def _fields(fmt: DateFormat, m: re.Match) -> tuple[int, int, int] | None:
    """Return (year, month, day) from a fixed-format match."""
    if fmt in (DateFormat.ISO, DateFormat.ISO_SLASH):
        return int(m.group(1)), int(m.group(2)), int(m.group(3))
    if fmt == DateFormat.US:
        return int(m.group(3)), int(m.group(1)), int(m.group(2))
    if fmt == DateFormat.EU:
        return int(m.group(3)), int(m.group(2)), int(m.group(1))
    if fmt == DateFormat.DAY_MONTH_NAME:
        month = MONTH_ABBREVIATIONS.get(m.group(2).title())
        if month is None:
            return None
        return int(m.group(3)), month, int(m.group(1))
    return None


def _to_date(ts) -> Optional[dt.date]:
    if ts is None or pd.isna(ts):
        return None
    return dt.date(ts.year, ts.month, ts.day)


def _parse_auto(text: str) -> Optional[dt.date]:
    """Generic parse via pandas; None when pandas can't make sense of it."""
    if not _FOUR_DIGIT_YEAR_RE.search(text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (TypeError, ValueError, OverflowError):
            return None
    return _to_date(ts)


def _parse_auto_many(texts: list[str]) -> dict[str, Optional[dt.date]]:
    """Parse distinct texts in one ``to_datetime`` call.

    ``format="mixed"`` reads every value on its own, the same way a single
    ``to_datetime`` call would; values it rejects are retried one at a time.
    """
    candidates = [t for t in texts if _FOUR_DIGIT_YEAR_RE.search(t)]
    parsed: dict[str, Optional[dt.date]] = dict.fromkeys(texts)
    if not candidates:
        return parsed

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            stamps = list(pd.to_datetime(pd.Series(candidates, dtype=object), errors="coerce", format="mixed"))
        except (TypeError, ValueError, OverflowError):
            # mixed UTC offsets and the like; parse individually
            stamps = [None] * len(candidates)

    for text, ts in zip(candidates, stamps):
        d = _to_date(ts)
        parsed[text] = d if d is not None else _parse_auto(text)
    return parsed


def parse_date_with_format(text: str, fmt: DateFormat | str = DateFormat.AUTO) -> Optional[dt.date]:
    """Parse a date string using the selected format (or ``auto``).

    Returns None for anything that doesn't parse, including impossible
    calendar dates such as 2024-02-30 and text without a four-digit year.
    """
    fmt = DateFormat(fmt)
    text = text.strip()
    if not text:
        return None
    if fmt == DateFormat.AUTO:
        return _parse_auto(text)

    m = _FIXED_PATTERNS[fmt].match(text)
    if not m:
        return None
    parts = _fields(fmt, m)
    if parts is None:
        return None
    try:
        return dt.date(*parts)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Bucketing
# ---------------------------------------------------------------------------

def _bucket(d: dt.date, month_bucket: bool) -> str:
    if month_bucket:
        return f"{d.year:04d}-{d.month:02d}"
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def _bucket_text(text: str, parsed: Optional[dt.date], month_bucket: bool) -> str:
    if parsed is None:
        m = _YEAR_MONTH_PREFIX_RE.match(text)
        if m:
            return f"{m.group(1)}-{int(m.group(2)):02d}"
        return text
    return _bucket(parsed, month_bucket)


def format_date_bucket(value: Any, month_bucket: bool = True, fmt: DateFormat | str = DateFormat.AUTO) -> str:
    """Reduce a raw date cell to a ``YYYY-MM`` or ``YYYY-MM-DD`` bucket.

    Never raises. Unparseable input falls back to a leading ``YYYY-M`` prefix
    when there is one, otherwise the trimmed original text is returned.
    """
    if is_blank(value):
        return ""
    # workbook date cells arrive as real datetimes; use their fields as-is
    if isinstance(value, dt.date):
        return _bucket(value, month_bucket)

    text = cell_text(value).strip()
    if not text:
        return ""
    return _bucket_text(text, parse_date_with_format(text, fmt), month_bucket)


def format_date_buckets(
    values: list[Any],
    month_bucket: bool = True,
    fmt: DateFormat | str = DateFormat.AUTO,
) -> list[str]:
    """Bucket a whole date column; same result as ``format_date_bucket`` per cell.

    Each distinct text is parsed once.
    """
    fmt = DateFormat(fmt)
    out: list[str] = []
    pending: list[tuple[int, str]] = []
    for value in values:
        if is_blank(value):
            out.append("")
        elif isinstance(value, dt.date):
            out.append(_bucket(value, month_bucket))
        else:
            text = cell_text(value).strip()
            if text:
                pending.append((len(out), text))
            out.append("")

    if not pending:
        return out

    distinct = list(dict.fromkeys(text for _, text in pending))
    if fmt == DateFormat.AUTO:
        parsed = _parse_auto_many(distinct)
    else:
        parsed = {text: parse_date_with_format(text, fmt) for text in distinct}
    buckets = {text: _bucket_text(text, parsed[text], month_bucket) for text in distinct}

    for idx, text in pending:
        out[idx] = buckets[text]
    return out
