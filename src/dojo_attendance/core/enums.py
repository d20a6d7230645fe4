from __future__ import annotations

from datetime import date
from enum import Enum


class ClassStatus(str, Enum):
    """Lifecycle of a schedule definition or of a single occurrence."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    """Outcome recorded for one student at one occurrence."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class Weekday(int, Enum):
    """Civil weekday numbers, Sunday first."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


def civil_weekday(value: date) -> int:
    # date.weekday() is Monday=0; shift so Sunday=0.
    return (value.weekday() + 1) % 7
