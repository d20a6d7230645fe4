from __future__ import annotations

import logging
from typing import Any, Mapping

from ..common.datetime_utils import coerce_date, coerce_time
from ..core.enums import ClassStatus
from ..core.exceptions import DataIntegrityWarning
from ..database.mysql_base import split_csv
from .model import ScheduleDefinition, SessionOverride

logger = logging.getLogger(__name__)


def _status(value: Any, *, record_id: object) -> ClassStatus:
    if value in (None, ""):
        return ClassStatus.SCHEDULED
    try:
        return ClassStatus(value)
    except ValueError:
        raise DataIntegrityWarning(f"unknown status {value!r}", record_id=record_id)


def _weekdays(value: Any, *, record_id: object) -> tuple[int, ...]:
    items = split_csv(value) if isinstance(value, str) else list(value or [])
    out: set[int] = set()
    for item in items:
        try:
            day = int(item)
        except (TypeError, ValueError):
            raise DataIntegrityWarning(f"unreadable weekday {item!r}", record_id=record_id)
        if day < 0 or day > 6:
            raise DataIntegrityWarning(f"weekday out of range: {day}", record_id=record_id)
        out.add(day)
    return tuple(sorted(out))


def _sessions(rows: Any, *, record_id: object) -> tuple[SessionOverride, ...]:
    # Later entries win when a date appears more than once.
    by_date: dict = {}
    for row in rows or ():
        s = session_from_row(row, record_id=record_id)
        if s.session_date in by_date:
            logger.warning("schedule %s has duplicate sessions for %s, keeping the last", record_id, s.session_date)
            del by_date[s.session_date]
        by_date[s.session_date] = s
    return tuple(by_date.values())


def session_from_row(row: Mapping[str, Any], *, record_id: object = None) -> SessionOverride:
    if not isinstance(row, Mapping):
        raise DataIntegrityWarning(f"unreadable session entry {row!r}", record_id=record_id)
    return SessionOverride(
        session_date=coerce_date(row.get("session_date"), record_id=record_id, field_name="session date"),
        instructor=str(row.get("instructor") or ""),
        status=_status(row.get("status"), record_id=record_id),
        notes=str(row.get("notes") or ""),
    )


def schedule_from_row(row: Mapping[str, Any]) -> ScheduleDefinition:
    """Build a ScheduleDefinition from a stored row with its ``sessions`` rows attached.

    Raises DataIntegrityWarning when the row cannot be trusted.
    """

    record_id = row.get("schedule_id")
    recurring = bool(row.get("recurring"))
    end_raw = row.get("recurrence_end_date")

    try:
        return ScheduleDefinition(
            schedule_id=int(record_id),
            class_id=int(row.get("class_id")),
            anchor_date=coerce_date(row.get("anchor_date"), record_id=record_id, field_name="anchor date"),
            start_time=coerce_time(row.get("start_time"), record_id=record_id, field_name="start time"),
            end_time=coerce_time(row.get("end_time"), record_id=record_id, field_name="end time"),
            recurring=recurring,
            days_of_week=_weekdays(row.get("days_of_week"), record_id=record_id) if recurring else (),
            recurrence_end_date=(
                coerce_date(end_raw, record_id=record_id, field_name="recurrence end date")
                if recurring and end_raw not in (None, "")
                else None
            ),
            status=_status(row.get("status"), record_id=record_id),
            sessions=_sessions(row.get("sessions"), record_id=record_id),
            version=int(row.get("version") or 0),
        )
    except (TypeError, ValueError) as e:
        raise DataIntegrityWarning(str(e), record_id=record_id) from e
