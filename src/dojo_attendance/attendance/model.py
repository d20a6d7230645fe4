from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..classes.model import ClassDefinition
from ..core.enums import AttendanceStatus
from ..schedules.model import ClassOccurrence


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance at one occurrence of a schedule."""

    attendance_id: int
    student_id: int
    schedule_id: int
    session_date: date
    status: AttendanceStatus
    category: str
    notes: str = ""
    recorded_by: str = ""
    recorded_at: Optional[datetime] = None
    student_name: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "scheduleId": self.schedule_id,
            "date": self.session_date.isoformat(),
            "status": self.status.value,
            "category": self.category,
            "notes": self.notes,
            "recordedBy": self.recorded_by,
            "recordedAt": self.recorded_at.isoformat(timespec="seconds") if self.recorded_at else None,
        }


@dataclass(frozen=True)
class NewAttendance:
    student_id: int
    schedule_id: int
    session_date: date
    status: AttendanceStatus
    category: str
    notes: str = ""


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports: one attendance row joined with its student."""

    student_id: int
    student_name: str
    student_category: str
    schedule_id: int
    session_date: date
    status: AttendanceStatus


@dataclass(frozen=True)
class MarkResult:
    """Outcome of one entry of a bulk mark request."""

    student_id: object
    success: bool
    attendance_id: Optional[int] = None
    schedule_id: Optional[int] = None
    session_date: Optional[date] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"studentId": self.student_id, "success": self.success}
        if self.success:
            out["attendanceId"] = self.attendance_id
            out["scheduleId"] = self.schedule_id
            out["date"] = self.session_date.isoformat() if self.session_date else None
        else:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class MarkOutcome:
    results: list[MarkResult]
    reconciled: list[tuple[int, date]]
    reconcile_failures: list[tuple[int, date, str]]

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "sessionsUpdated": [{"scheduleId": s, "date": d.isoformat()} for s, d in self.reconciled],
            "sessionUpdateFailures": [
                {"scheduleId": s, "date": d.isoformat(), "error": msg} for s, d, msg in self.reconcile_failures
            ],
        }


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


@dataclass(frozen=True)
class PastClass:
    """A held (or due) occurrence together with the class it belongs to."""

    occurrence: ClassOccurrence
    class_def: ClassDefinition

    def to_dict(self) -> dict:
        out = self.occurrence.to_dict()
        out["className"] = self.class_def.name
        out["classInstructor"] = self.class_def.instructor
        out["categories"] = list(self.class_def.categories)
        return out
