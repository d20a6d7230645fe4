from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow, NewAttendance


class AttendanceRepository(Protocol):
    def upsert(self, *, attendance: NewAttendance, recorded_by: str, recorded_at: datetime) -> int:
        """Insert or replace the record for (student, schedule, date). Returns its id."""

        raise NotImplementedError

    def list_for_session(
        self,
        *,
        schedule_id: int,
        session_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_report_rows(self, *, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
