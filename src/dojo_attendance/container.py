from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_NEXT_CLASS_LOOKAHEAD_DAYS, DEFAULT_RECONCILE_ATTEMPTS
from .core.school_config import SchoolConfig
from .database.connection import DBConfig, DatabaseConnection
from .schedules.expander import ScheduleExpander
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.reconciler import SessionReconciler
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    school_config: SchoolConfig
    next_class_lookahead_days: int

    classes_repo: ClassRepository
    schedules_repo: ScheduleRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    class_service: ClassService
    schedule_service: ScheduleService
    schedule_expander: ScheduleExpander
    session_reconciler: SessionReconciler
    student_service: StudentService
    attendance_service: AttendanceService


def wire_container(
    *,
    classes_repo: ClassRepository,
    schedules_repo: ScheduleRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    school_config: SchoolConfig,
    conn: Optional[DatabaseConnection] = None,
    reconcile_max_attempts: int = DEFAULT_RECONCILE_ATTEMPTS,
    next_class_lookahead_days: int = DEFAULT_NEXT_CLASS_LOOKAHEAD_DAYS,
) -> Container:
    """Build the services on top of any repository implementations."""

    session_reconciler = SessionReconciler(schedules_repo, max_attempts=reconcile_max_attempts)
    schedule_expander = ScheduleExpander(schedules_repo)

    return Container(
        conn=conn,
        school_config=school_config,
        next_class_lookahead_days=int(next_class_lookahead_days),
        classes_repo=classes_repo,
        schedules_repo=schedules_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        class_service=ClassService(classes_repo, school_config),
        schedule_service=ScheduleService(schedules_repo, classes_repo),
        schedule_expander=schedule_expander,
        session_reconciler=session_reconciler,
        student_service=StudentService(students_repo, school_config),
        attendance_service=AttendanceService(
            attendance_repo,
            students_repo,
            schedules_repo,
            session_reconciler,
            school_config,
            classes_repo,
            schedule_expander,
        ),
    )


def build_container(
    *,
    db_config: dict,
    school_config: SchoolConfig,
    reconcile_max_attempts: int = DEFAULT_RECONCILE_ATTEMPTS,
    next_class_lookahead_days: int = DEFAULT_NEXT_CLASS_LOOKAHEAD_DAYS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_container(
        classes_repo=MySQLClassRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        school_config=school_config,
        conn=conn,
        reconcile_max_attempts=reconcile_max_attempts,
        next_class_lookahead_days=next_class_lookahead_days,
    )
