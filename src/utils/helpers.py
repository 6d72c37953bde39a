"""General-purpose helper utilities for the quiz reporting project."""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def parse_iso_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 string (or date/datetime) into an aware UTC datetime.

    Naive values are taken to be UTC.  A trailing ``Z`` is accepted.

    Raises:
        ValueError: If *value* cannot be interpreted as a timestamp.

    Examples:
        >>> parse_iso_datetime("2025-03-01T10:00:00Z").isoformat()
        '2025-03-01T10:00:00+00:00'
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not a timestamp: {value!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def try_parse_datetime(value: Any) -> Optional[datetime]:
    """Like :func:`parse_iso_datetime` but return None for unparseable input."""
    if value is None:
        return None
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError):
        return None


def to_iso(dt: datetime) -> str:
    """Serialise a datetime as an ISO-8601 UTC string."""
    return parse_iso_datetime(dt).isoformat()


def to_naive_utc(dt: datetime) -> datetime:
    """Strip tzinfo after converting to UTC (SQLite stores naive timestamps)."""
    return parse_iso_datetime(dt).replace(tzinfo=None)


def iso_week_label(dt: datetime) -> str:
    """Return the ISO week of *dt* as ``YYYY-Www``.

    Examples:
        >>> iso_week_label(datetime(2025, 1, 1))
        '2025-W01'
    """
    year, week, _ = dt.isocalendar()
    return f"{year}-W{week:02d}"


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division returning *default* when denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def is_number(value: Any) -> bool:
    """True for int/float values, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def sanitize_filename(text: str) -> str:
    """Turn a report title into a file-name stem.

    Whitespace runs and path separators become underscores.

    Examples:
        >>> sanitize_filename("Term 1  Maths/Science")
        'Term_1_Maths_Science'
    """
    stem = re.sub(r"[\s/\\]+", "_", text.strip())
    return stem or "report"
