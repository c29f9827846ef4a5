"""
Date / time utility helpers.

Query dates are parsed as ``"YYYY-MM-DD"``.  Store timestamps are
serialised as ISO-8601 in UTC with millisecond precision and a ``Z``
suffix (``"2026-02-18T14:03:00.000Z"``).
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

DATE_FORMAT = "%Y-%m-%d"

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(raw: Optional[str]) -> date:
    if raw is None or not isinstance(raw, str) or not _DATE_PATTERN.match(raw):
        raise ValueError(f"Invalid date {raw!r}. Expected format: YYYY-MM-DD")
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Invalid date {raw!r}. Not a calendar date") from exc


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def start_of_next_day(day: date) -> datetime:
    return start_of_day(day + timedelta(days=1))


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    return as_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Interpret a store timestamp: native datetimes pass through, ISO strings
    are parsed.  Anything else yields ``None``.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value:
        try:
            # fromisoformat only accepts a trailing "Z" from 3.11 on
            return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
