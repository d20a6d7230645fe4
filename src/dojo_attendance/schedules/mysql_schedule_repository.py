from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import ClassStatus
from ..core.exceptions import ConcurrentUpdateConflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, join_csv
from .mapper import schedule_from_row
from .model import NewSchedule, ScheduleDefinition, SessionOverride
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

_SCHEDULE_COLUMNS = """
    schedule_id, class_id, anchor_date, start_time, end_time,
    recurring, days_of_week, recurrence_end_date, status, version
"""


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _attach_sessions(cur, rows: list[dict]) -> list[dict]:
        if not rows:
            return rows

        by_id = {int(r["schedule_id"]): r for r in rows}
        for r in rows:
            r["sessions"] = []

        placeholders = ",".join(["%s"] * len(by_id))
        cur.execute(
            f"""
            SELECT schedule_id, session_date, instructor, status, notes
            FROM schedule_sessions
            WHERE schedule_id IN ({placeholders})
            ORDER BY session_id ASC
            """,
            tuple(by_id.keys()),
        )
        for s in fetchall(cur):
            by_id[int(s["schedule_id"])]["sessions"].append(s)
        return rows

    def list_window_rows(self, *, range_start: date, range_end: date, class_id: Optional[int] = None) -> Sequence[dict]:
        clauses = [
            """(
                (recurring = 1 AND (recurrence_end_date IS NULL OR recurrence_end_date >= %s) AND anchor_date <= %s)
                OR (recurring = 0 AND anchor_date BETWEEN %s AND %s)
            )"""
        ]
        params: list[object] = [range_start, range_end, range_start, range_end]
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SCHEDULE_COLUMNS}
                FROM schedules
                WHERE {where}
                ORDER BY anchor_date ASC, start_time ASC, schedule_id ASC
                """,
                tuple(params),
            )
            return self._attach_sessions(cur, fetchall(cur))

    def get_by_id(self, schedule_id: int) -> Optional[ScheduleDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SCHEDULE_COLUMNS} FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            if not r:
                return None
            self._attach_sessions(cur, [r])
        return schedule_from_row(r)

    def create(self, *, schedule: NewSchedule) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(
                    class_id, anchor_date, start_time, end_time,
                    recurring, days_of_week, recurrence_end_date, status, version
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(schedule.class_id),
                    schedule.anchor_date,
                    schedule.start_time,
                    schedule.end_time,
                    1 if schedule.recurring else 0,
                    join_csv(schedule.days_of_week) or None,
                    schedule.recurrence_end_date,
                    schedule.status.value,
                ),
            )
            return int(cur.lastrowid)

    def update(self, *, schedule_id: int, schedule: NewSchedule) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedules
                SET class_id=%s, anchor_date=%s, start_time=%s, end_time=%s,
                    recurring=%s, days_of_week=%s, recurrence_end_date=%s, status=%s,
                    version=version+1
                WHERE schedule_id=%s
                """,
                (
                    int(schedule.class_id),
                    schedule.anchor_date,
                    schedule.start_time,
                    schedule.end_time,
                    1 if schedule.recurring else 0,
                    join_csv(schedule.days_of_week) or None,
                    schedule.recurrence_end_date,
                    schedule.status.value,
                    int(schedule_id),
                ),
            )
            # version always moves, so an existing row always counts as affected.
            return cur.rowcount > 0

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # schedule_sessions rows go with it (ON DELETE CASCADE).
            cur.execute("DELETE FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def apply_session(
        self,
        *,
        schedule_id: int,
        override: SessionOverride,
        schedule_status: Optional[ClassStatus] = None,
        expected_version: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if schedule_status is not None:
                params: list[object] = [schedule_status.value, int(schedule_id)]
                guard = ""
                if expected_version is not None:
                    guard = " AND version=%s"
                    params.append(int(expected_version))
                cur.execute(
                    f"UPDATE schedules SET status=%s, version=version+1 WHERE schedule_id=%s{guard}",
                    tuple(params),
                )
            else:
                cur.execute("UPDATE schedules SET version=version+1 WHERE schedule_id=%s", (int(schedule_id),))

            if cur.rowcount == 0:
                cur.execute("SELECT version FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
                r = fetchone(cur)
                if not r:
                    return False
                # Raising inside db_cursor rolls the transaction back.
                raise ConcurrentUpdateConflict(
                    f"Schedule {schedule_id} changed (version {r['version']}, expected {expected_version})"
                )

            cur.execute(
                """
                INSERT INTO schedule_sessions(schedule_id, session_date, instructor, status, notes)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE instructor=VALUES(instructor), status=VALUES(status), notes=VALUES(notes)
                """,
                (
                    int(schedule_id),
                    override.session_date,
                    override.instructor,
                    override.status.value,
                    override.notes,
                ),
            )
            logger.debug("upserted session %s for schedule %s", override.session_date, schedule_id)
            return True
