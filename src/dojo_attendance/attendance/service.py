from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_date_range, require_enum, require_max_length, require_non_empty
from ..core.constants import MAX_NOTES_LENGTH, PAST_SEARCH_DAYS
from ..core.enums import AttendanceStatus, ClassStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..core.school_config import SchoolConfig
from ..schedules.expander import ScheduleExpander
from ..schedules.model import ScheduleDefinition
from ..schedules.reconciler import SessionReconciler
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from .model import AttendanceRecord, MarkOutcome, MarkResult, NewAttendance, PastClass, ReportData
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _positive_id(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool) or number <= 0:
        raise ValidationError(f"Invalid {field_name}")
    return number


def attendance_percentage(present: int, late: int, total: int) -> float:
    """Late counts as half an attendance."""

    if total <= 0:
        return 0.0
    return round((present + 0.5 * late) / total * 100, 2)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        schedules: ScheduleRepository,
        reconciler: SessionReconciler,
        school_config: SchoolConfig,
        classes: ClassRepository,
        expander: ScheduleExpander,
    ):
        self._attendance = attendance
        self._students = students
        self._schedules = schedules
        self._reconciler = reconciler
        self._config = school_config
        self._classes = classes
        self._expander = expander

    def _schedule(self, schedule_id: int, cache: dict[int, ScheduleDefinition]) -> ScheduleDefinition:
        if schedule_id not in cache:
            definition = self._schedules.get_by_id(schedule_id)
            if not definition:
                raise NotFoundError(f"Schedule {schedule_id} not found")
            cache[schedule_id] = definition
        return cache[schedule_id]

    def _entry(self, raw: Mapping, cache: dict[int, ScheduleDefinition]) -> NewAttendance:
        student_id = _positive_id(raw.get("student_id"), "student id")
        schedule_id = _positive_id(raw.get("schedule_id"), "schedule id")

        raw_date = raw.get("date")
        if raw_date in (None, ""):
            session_date = now_local().date()
        elif isinstance(raw_date, date):
            session_date = raw_date
        else:
            session_date = parse_iso_date(str(raw_date))

        status = require_enum(raw.get("status"), AttendanceStatus, "attendance status")
        category = require_non_empty(raw.get("category"), "Category")
        if not self._config.is_valid_category(category):
            raise ValidationError(f"Invalid category: {category}")
        notes = require_max_length((raw.get("notes") or "").strip(), "Notes", MAX_NOTES_LENGTH)

        if not self._students.get_by_id(student_id):
            raise NotFoundError(f"Student {student_id} not found")
        definition = self._schedule(schedule_id, cache)
        if not definition.occurs_on(session_date):
            raise ValidationError(f"Schedule {schedule_id} has no class on {session_date.isoformat()}")

        return NewAttendance(
            student_id=student_id,
            schedule_id=schedule_id,
            session_date=session_date,
            status=status,
            category=category,
            notes=notes,
        )

    def mark(
        self,
        entries: Iterable[Mapping],
        recorded_by: str,
        instructor: Optional[str] = None,
        session_notes: Optional[str] = None,
    ) -> MarkOutcome:
        """Store each entry independently, then mark every touched occurrence completed.

        A bad entry fails alone and is reported in the results. The sessions
        are updated only after all entries are stored; a failed session update
        is logged and leaves the stored attendance in place.
        """

        recorded_by = require_non_empty(recorded_by, "Recorded by")
        entries = list(entries or ())
        if not entries:
            raise ValidationError("At least one attendance entry is required")

        recorded_at = now_local()
        cache: dict[int, ScheduleDefinition] = {}
        results: list[MarkResult] = []
        touched: dict[tuple[int, date], None] = {}

        for raw in entries:
            student_ref = raw.get("student_id") if isinstance(raw, Mapping) else None
            try:
                if not isinstance(raw, Mapping):
                    raise ValidationError("Each attendance entry must be an object")
                entry = self._entry(raw, cache)
                attendance_id = self._attendance.upsert(
                    attendance=entry, recorded_by=recorded_by, recorded_at=recorded_at
                )
            except DomainError as e:
                results.append(MarkResult(student_id=student_ref, success=False, error=str(e)))
                continue

            touched[(entry.schedule_id, entry.session_date)] = None
            results.append(
                MarkResult(
                    student_id=entry.student_id,
                    success=True,
                    attendance_id=attendance_id,
                    schedule_id=entry.schedule_id,
                    session_date=entry.session_date,
                )
            )

        reconciled: list[tuple[int, date]] = []
        failures: list[tuple[int, date, str]] = []
        for schedule_id, session_date in touched:
            try:
                self._complete_session(cache[schedule_id], session_date, instructor or recorded_by, session_notes)
            except DomainError as e:
                logger.warning("attendance stored but session %s of schedule %s not updated: %s", session_date, schedule_id, e)
                failures.append((schedule_id, session_date, str(e)))
                continue
            reconciled.append((schedule_id, session_date))

        logger.info(
            "%s marked %d/%d attendance entries, %d session(s) completed",
            recorded_by,
            sum(1 for r in results if r.success),
            len(results),
            len(reconciled),
        )
        return MarkOutcome(results=results, reconciled=reconciled, reconcile_failures=failures)

    def _complete_session(
        self,
        definition: ScheduleDefinition,
        session_date: date,
        instructor: str,
        session_notes: Optional[str],
    ) -> None:
        if session_notes is None:
            existing = definition.session_for(session_date)
            session_notes = existing.notes if existing else ""

        self._reconciler.apply_outcome(
            definition.schedule_id,
            session_date,
            instructor,
            ClassStatus.COMPLETED,
            session_notes,
            # A one-off class is over once its only occurrence is.
            schedule_status=None if definition.recurring else ClassStatus.COMPLETED,
        )

    def for_session(
        self,
        schedule_id: int,
        session_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        schedule_id = _positive_id(schedule_id, "schedule id")
        if not self._schedules.get_by_id(schedule_id):
            raise NotFoundError(f"Schedule {schedule_id} not found")
        if category and not self._config.is_valid_category(category):
            raise ValidationError(f"Invalid category: {category}")
        return self._attendance.list_for_session(
            schedule_id=schedule_id, session_date=session_date, category=category or None
        )

    def report(self, start: date, end: date) -> ReportData:
        require_date_range(start, end, "report range")

        rows: list[dict] = []
        summary_map: dict[int, dict] = {}
        for r in self._attendance.get_report_rows(start_date=start, end_date=end):
            rows.append(
                {
                    "date": r.session_date.isoformat(),
                    "student_id": r.student_id,
                    "student_name": r.student_name,
                    "schedule_id": r.schedule_id,
                    "status": r.status.value,
                }
            )

            s = summary_map.setdefault(
                r.student_id,
                {
                    "student_id": r.student_id,
                    "student_name": r.student_name,
                    "category": r.student_category,
                    "total_classes": 0,
                    "present": 0,
                    "absent": 0,
                    "late": 0,
                },
            )
            s["total_classes"] += 1
            s[r.status.value] += 1

        summary = sorted(summary_map.values(), key=lambda s: (s["student_name"].lower(), s["student_id"]))
        for s in summary:
            s["attendance_percentage"] = attendance_percentage(s["present"], s["late"], s["total_classes"])

        return ReportData(rows=rows, summary=summary)

    def search_past(
        self,
        day: Optional[date] = None,
        instructor: Optional[str] = None,
        category: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> list[PastClass]:
        """Past classes, newest first.

        ``day`` selects every class on that date; otherwise the search covers
        the last PAST_SEARCH_DAYS days up to classes that have started by
        ``now``. ``instructor`` matches who taught the occurrence or who
        normally teaches the class.
        """

        if category and not self._config.is_valid_category(category):
            raise ValidationError(f"Invalid category: {category}")
        now = now or now_local()

        if day is not None:
            occurrences = self._expander.expand(day, day)
        else:
            today = now.date()
            occurrences = [
                o
                for o in self._expander.expand(today - timedelta(days=PAST_SEARCH_DAYS - 1), today)
                if o.occurrence_date < today or o.start_time <= now.time()
            ]

        wanted = (instructor or "").strip().casefold()
        classes = {c.class_id: c for c in self._classes.list_all()}
        out: list[PastClass] = []
        for o in occurrences:
            cls = classes.get(o.class_id)
            if cls is None:
                continue
            if category and category not in cls.categories:
                continue
            if wanted and wanted not in ((o.instructor or "").casefold(), cls.instructor.casefold()):
                continue
            out.append(PastClass(occurrence=o, class_def=cls))

        out.sort(key=lambda p: p.occurrence.sort_key, reverse=True)
        return out
