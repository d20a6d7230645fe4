from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, split_csv
from .model import AttendanceRecord, AttendanceReportRow, NewAttendance
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, *, attendance: NewAttendance, recorded_by: str, recorded_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(student_id, schedule_id, session_date, status, category, notes, recorded_by, recorded_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status), category=VALUES(category), notes=VALUES(notes),
                    recorded_by=VALUES(recorded_by), recorded_at=VALUES(recorded_at)
                """,
                (
                    int(attendance.student_id),
                    int(attendance.schedule_id),
                    attendance.session_date,
                    attendance.status.value,
                    attendance.category,
                    attendance.notes,
                    recorded_by,
                    recorded_at,
                ),
            )
            # lastrowid is 0 when an existing row was updated without change.
            cur.execute(
                """
                SELECT attendance_id FROM attendance
                WHERE student_id=%s AND schedule_id=%s AND session_date=%s
                """,
                (int(attendance.student_id), int(attendance.schedule_id), attendance.session_date),
            )
            r = fetchone(cur)
            return int(r["attendance_id"]) if r else int(cur.lastrowid or 0)

    def list_for_session(
        self,
        *,
        schedule_id: int,
        session_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        where = ["a.schedule_id=%s"]
        params: list[object] = [int(schedule_id)]
        if session_date is not None:
            where.append("a.session_date=%s")
            params.append(session_date)
        if category:
            where.append("a.category=%s")
            params.append(category)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.attendance_id, a.student_id, a.schedule_id, a.session_date, a.status,
                       a.category, a.notes, a.recorded_by, a.recorded_at, s.name AS student_name
                FROM attendance a
                JOIN students s ON s.student_id = a.student_id
                WHERE {' AND '.join(where)}
                ORDER BY s.name ASC, a.session_date ASC
                """,
                tuple(params),
            )
            return [
                AttendanceRecord(
                    attendance_id=int(r["attendance_id"]),
                    student_id=int(r["student_id"]),
                    schedule_id=int(r["schedule_id"]),
                    session_date=r["session_date"],
                    status=AttendanceStatus(r["status"]),
                    category=r.get("category") or "",
                    notes=r.get("notes") or "",
                    recorded_by=r.get("recorded_by") or "",
                    recorded_at=r.get("recorded_at"),
                    student_name=r.get("student_name") or "",
                )
                for r in fetchall(cur)
            ]

    def get_report_rows(self, *, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.student_id, s.name AS student_name, s.categories, a.schedule_id, a.session_date, a.status
                FROM attendance a
                JOIN students s ON s.student_id = a.student_id
                WHERE a.session_date BETWEEN %s AND %s
                ORDER BY s.name ASC, a.session_date ASC
                """,
                (start_date, end_date),
            )
            out = []
            for r in fetchall(cur):
                cats = split_csv(r.get("categories"))
                out.append(
                    AttendanceReportRow(
                        student_id=int(r["student_id"]),
                        student_name=r["student_name"],
                        student_category=cats[0] if cats else "",
                        schedule_id=int(r["schedule_id"]),
                        session_date=r["session_date"],
                        status=AttendanceStatus(r["status"]),
                    )
                )
            return out
