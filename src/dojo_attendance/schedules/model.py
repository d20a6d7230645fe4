from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_hhmm
from ..core.enums import ClassStatus, civil_weekday


@dataclass(frozen=True)
class SessionOverride:
    """Per-date facts for one occurrence of a schedule."""

    session_date: date
    instructor: str
    status: ClassStatus = ClassStatus.SCHEDULED
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "date": self.session_date.isoformat(),
            "instructor": self.instructor,
            "status": self.status.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ScheduleDefinition:
    """Domain entity: one authored schedule entry, single or recurring."""

    schedule_id: int
    class_id: int
    anchor_date: date
    start_time: time
    end_time: time
    recurring: bool = False
    days_of_week: tuple[int, ...] = ()
    recurrence_end_date: Optional[date] = None
    status: ClassStatus = ClassStatus.SCHEDULED
    sessions: tuple[SessionOverride, ...] = ()
    version: int = 0

    def __post_init__(self):
        if self.recurring and not self.days_of_week:
            raise ValueError("recurring schedule without days of week")
        if self.recurring and self.recurrence_end_date and self.recurrence_end_date < self.anchor_date:
            raise ValueError("recurrence ends before it starts")
        seen = set()
        for s in self.sessions:
            if s.session_date in seen:
                raise ValueError(f"duplicate session for {s.session_date}")
            seen.add(s.session_date)

    def session_for(self, session_date: date) -> Optional[SessionOverride]:
        for s in self.sessions:
            if s.session_date == session_date:
                return s
        return None

    def occurs_on(self, day: date) -> bool:
        if not self.recurring:
            return day == self.anchor_date
        if day < self.anchor_date:
            return False
        if self.recurrence_end_date and day > self.recurrence_end_date:
            return False
        return civil_weekday(day) in self.days_of_week

    def to_dict(self) -> dict:
        return {
            "id": self.schedule_id,
            "classId": self.class_id,
            "date": self.anchor_date.isoformat(),
            "startTime": format_hhmm(self.start_time),
            "endTime": format_hhmm(self.end_time),
            "recurring": self.recurring,
            "daysOfWeek": list(self.days_of_week),
            "recurrenceEndDate": self.recurrence_end_date.isoformat() if self.recurrence_end_date else None,
            "status": self.status.value,
            "sessions": [s.to_dict() for s in self.sessions],
        }


@dataclass(frozen=True)
class ClassOccurrence:
    """Read-model: one concrete class meeting, computed per query and never stored."""

    occurrence_date: date
    start_time: time
    end_time: time
    instructor: Optional[str]
    status: ClassStatus
    notes: str
    schedule_id: int
    class_id: int
    materialized_from_recurrence: bool

    @property
    def sort_key(self) -> tuple[date, time]:
        return (self.occurrence_date, self.start_time)

    def to_dict(self) -> dict:
        return {
            "date": self.occurrence_date.isoformat(),
            "startTime": format_hhmm(self.start_time),
            "endTime": format_hhmm(self.end_time),
            "instructor": self.instructor,
            "status": self.status.value,
            "notes": self.notes,
            "originatingScheduleId": self.schedule_id,
            "classId": self.class_id,
            "materializedFromRecurrence": self.materialized_from_recurrence,
        }


@dataclass(frozen=True)
class NewSchedule:
    """Validated authoring input for creating or replacing a schedule's timing."""

    class_id: int
    anchor_date: date
    start_time: time
    end_time: time
    recurring: bool = False
    days_of_week: tuple[int, ...] = ()
    recurrence_end_date: Optional[date] = None
    status: ClassStatus = ClassStatus.SCHEDULED
