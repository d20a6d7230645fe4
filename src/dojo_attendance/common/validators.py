from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import Weekday
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> str:
    value = value or ""
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_int_range(value, field_name: str, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def require_date_range(start: date, end: date, context: str = "date range") -> None:
    if start > end:
        raise ValidationError(f"Invalid {context}: start date ({start}) must not be after end date ({end})")


def require_time_range(start: time, end: time, context: str = "time range") -> None:
    if start >= end:
        raise ValidationError(f"Invalid {context}: start time must be before end time")


def require_weekdays(days: Sequence) -> tuple[int, ...]:
    """Validate weekday numbers (0=Sunday..6=Saturday); returns them sorted, de-duplicated."""

    if not days:
        raise ValidationError("A recurring schedule needs at least one day of the week")

    out: set[int] = set()
    for d in days:
        if isinstance(d, bool) or not isinstance(d, int) or not Weekday.SUNDAY <= d <= Weekday.SATURDAY:
            raise ValidationError("Each day must be a number between 0 (Sunday) and 6 (Saturday)")
        out.add(d)
    return tuple(sorted(out))


def require_enum(value, enum_cls, field_name: str):
    """Coerce a raw value into a member of ``enum_cls`` or raise ValidationError."""

    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}: {value}. Must be one of: {choices}")
