from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_NEXT_CLASS_LOOKAHEAD_DAYS, MAX_QUERY_DAYS
from ..core.enums import ClassStatus
from ..core.exceptions import DataIntegrityWarning, ValidationError
from .mapper import schedule_from_row
from .model import ClassOccurrence, ScheduleDefinition
from .recurrence import enumerate_dates, resolve_session
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleExpander:
    """Turns stored schedule definitions into the dated occurrences of a query window."""

    def __init__(self, schedules: ScheduleRepository, *, max_query_days: int = MAX_QUERY_DAYS):
        self._schedules = schedules
        self._max_query_days = int(max_query_days)

    def _validate_query(self, range_start: date, range_end: date, class_id: Optional[int]) -> None:
        if not isinstance(range_start, date) or not isinstance(range_end, date):
            raise ValidationError("Both start and end dates are required")
        require_date_range(range_start, range_end, "query range")
        if (range_end - range_start).days >= self._max_query_days:
            raise ValidationError(f"Query range cannot exceed {self._max_query_days} days")
        if class_id is not None and int(class_id) <= 0:
            raise ValidationError("Invalid class id")

    def expand(self, range_start: date, range_end: date, class_id: Optional[int] = None) -> list[ClassOccurrence]:
        """Occurrences inside ``[range_start, range_end]`` ordered by (date, start time).

        Raises ValidationError for a malformed query. Stored records that fail
        to parse are logged and skipped.
        """

        self._validate_query(range_start, range_end, class_id)

        rows = self._schedules.list_window_rows(range_start=range_start, range_end=range_end, class_id=class_id)

        out: list[ClassOccurrence] = []
        skipped = 0
        for row in rows:
            try:
                definition = schedule_from_row(row)
            except DataIntegrityWarning as e:
                skipped += 1
                logger.warning("skipping schedule %s during expansion: %s", e.record_id, e)
                continue
            out.extend(self._occurrences(definition, range_start, range_end))

        # list.sort is stable: equal (date, start) keep load order.
        out.sort(key=lambda o: o.sort_key)

        if skipped:
            logger.warning("expanded %s..%s with %d unreadable schedule(s) skipped", range_start, range_end, skipped)
        return out

    def _occurrences(self, definition: ScheduleDefinition, range_start: date, range_end: date) -> Iterator[ClassOccurrence]:
        if not definition.recurring:
            if range_start <= definition.anchor_date <= range_end:
                yield self._occurrence(definition, definition.anchor_date, default_status=definition.status)
            return

        window = enumerate_dates(
            definition.anchor_date,
            range_start,
            range_end,
            definition.days_of_week,
            definition.recurrence_end_date,
        )
        for day in window:
            # Occurrences without an override start out scheduled, whatever the parent's status says.
            yield self._occurrence(definition, day, default_status=ClassStatus.SCHEDULED)

    @staticmethod
    def _occurrence(definition: ScheduleDefinition, day: date, *, default_status: ClassStatus) -> ClassOccurrence:
        effective = resolve_session(day, definition.sessions, default_status)
        return ClassOccurrence(
            occurrence_date=day,
            start_time=definition.start_time,
            end_time=definition.end_time,
            instructor=effective.instructor,
            status=effective.status,
            notes=effective.notes,
            schedule_id=definition.schedule_id,
            class_id=definition.class_id,
            materialized_from_recurrence=definition.recurring,
        )

    def for_day(self, day: date, *, active_only: bool = True) -> list[ClassOccurrence]:
        """Classes on one calendar day; by default only those still to be held."""

        occurrences = self.expand(day, day)
        if not active_only:
            return occurrences
        return [o for o in occurrences if o.status in (ClassStatus.SCHEDULED, ClassStatus.IN_PROGRESS)]

    def next_upcoming(
        self,
        *,
        now: Optional[datetime] = None,
        lookahead_days: int = DEFAULT_NEXT_CLASS_LOOKAHEAD_DAYS,
    ) -> Optional[ClassOccurrence]:
        """First scheduled class starting at or after ``now`` today, else the earliest in the lookahead."""

        now = now or now_local()
        today = now.date()

        for o in self.for_day(today):
            if o.status == ClassStatus.SCHEDULED and o.start_time >= now.time().replace(second=0, microsecond=0):
                return o

        if lookahead_days <= 0:
            return None
        later: Sequence[ClassOccurrence] = self.expand(today + timedelta(days=1), today + timedelta(days=lookahead_days))
        return next((o for o in later if o.status == ClassStatus.SCHEDULED), None)
