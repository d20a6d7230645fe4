from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ClassStatus
from .model import NewSchedule, ScheduleDefinition, SessionOverride


class ScheduleRepository(Protocol):
    def list_window_rows(self, *, range_start: date, range_end: date, class_id: Optional[int] = None) -> Sequence[dict]:
        """Raw stored rows (with ``sessions`` attached) that may have occurrences in the window.

        Recurring rows whose recurrence end is absent or >= range_start and whose
        anchor date is <= range_end, plus single rows dated inside the window.
        Rows are returned unparsed so one bad record cannot fail the query.
        """

        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[ScheduleDefinition]:
        raise NotImplementedError

    def create(self, *, schedule: NewSchedule) -> int:
        raise NotImplementedError

    def update(self, *, schedule_id: int, schedule: NewSchedule) -> bool:
        """Replace timing/recurrence fields. Session overrides are left alone."""

        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        raise NotImplementedError

    def apply_session(
        self,
        *,
        schedule_id: int,
        override: SessionOverride,
        schedule_status: Optional[ClassStatus] = None,
        expected_version: Optional[int] = None,
    ) -> bool:
        """Upsert the single override keyed by its date, in one atomic write.

        Other overrides are untouched. When ``schedule_status`` is given the
        parent's top-level status changes in the same write, guarded by
        ``expected_version``; a mismatch raises ConcurrentUpdateConflict.
        Returns False when the schedule does not exist.
        """

        raise NotImplementedError
