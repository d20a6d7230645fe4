from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any

from ..core.exceptions import DataIntegrityWarning, ValidationError

_HHMM = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format")


def parse_hhmm(value: str, field_name: str = "time") -> time:
    """Parse a wall-clock time written as H:MM or HH:MM."""
    m = _HHMM.match((value or "").strip())
    if not m:
        raise ValidationError(f"{field_name} must be a time in HH:MM format")
    return time(hour=int(m.group(1)), minute=int(m.group(2)))


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def coerce_date(value: Any, *, record_id: object = None, field_name: str = "date") -> date:
    """Normalize a stored date value.

    Drivers and legacy documents hand back date, datetime or ISO strings
    (optionally with a time part, which is dropped).
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise DataIntegrityWarning(f"unreadable {field_name}: {value!r}", record_id=record_id)


def coerce_time(value: Any, *, record_id: object = None, field_name: str = "time") -> time:
    """Normalize stored TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds())
        if 0 <= total_seconds < 86400:
            return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) >= 2 and parts[0].isdigit() and parts[1].isdigit():
            hours, minutes = int(parts[0]), int(parts[1])
            if hours < 24 and minutes < 60:
                return time(hour=hours, minute=minutes)

    raise DataIntegrityWarning(f"unreadable {field_name}: {value!r}", record_id=record_id)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now()
