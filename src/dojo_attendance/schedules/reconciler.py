from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from ..common.validators import require_enum, require_max_length, require_non_empty
from ..core.constants import DEFAULT_RECONCILE_ATTEMPTS, MAX_NOTES_LENGTH
from ..core.enums import ClassStatus
from ..core.exceptions import ConcurrentUpdateConflict, NotFoundError, ValidationError
from .model import ScheduleDefinition, SessionOverride
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class SessionReconciler:
    """Writes the outcome of one occurrence back onto its schedule's overrides."""

    def __init__(self, schedules: ScheduleRepository, *, max_attempts: int = DEFAULT_RECONCILE_ATTEMPTS):
        self._schedules = schedules
        self._max_attempts = max(1, int(max_attempts))

    def _load(self, schedule_id: int) -> ScheduleDefinition:
        definition = self._schedules.get_by_id(int(schedule_id))
        if not definition:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return definition

    def apply_outcome(
        self,
        schedule_id: int,
        occurrence_date: date,
        instructor: str,
        status: Union[ClassStatus, str],
        notes: Optional[str] = "",
        *,
        schedule_status: Optional[Union[ClassStatus, str]] = None,
    ) -> ScheduleDefinition:
        """Upsert the override for ``occurrence_date`` and return the updated schedule.

        Applying the same outcome twice leaves a single override for the date.
        ``schedule_status`` also changes the parent definition's own status in
        the same write (used when a one-off class is completed).
        """

        if not isinstance(occurrence_date, date):
            raise ValidationError("Occurrence date is required")
        instructor = require_non_empty(instructor, "Instructor")
        notes = require_max_length((notes or "").strip(), "Notes", MAX_NOTES_LENGTH)
        override = SessionOverride(
            session_date=occurrence_date,
            instructor=instructor,
            status=require_enum(status, ClassStatus, "status"),
            notes=notes,
        )
        parent_status = None
        if schedule_status is not None:
            parent_status = require_enum(schedule_status, ClassStatus, "schedule status")

        attempt = 0
        while True:
            attempt += 1
            # Re-read on every attempt; never resubmit a stale version.
            definition = self._load(schedule_id)
            if not definition.occurs_on(occurrence_date):
                raise ValidationError(f"Schedule {schedule_id} has no class on {occurrence_date.isoformat()}")

            try:
                found = self._schedules.apply_session(
                    schedule_id=definition.schedule_id,
                    override=override,
                    schedule_status=parent_status,
                    expected_version=definition.version if parent_status is not None else None,
                )
            except ConcurrentUpdateConflict:
                if attempt >= self._max_attempts:
                    logger.warning("giving up on schedule %s after %d conflicting attempts", schedule_id, attempt)
                    raise
                logger.warning("schedule %s changed during reconciliation, retrying (%d)", schedule_id, attempt)
                continue

            if not found:
                raise NotFoundError(f"Schedule {schedule_id} not found")

            logger.debug(
                "session %s of schedule %s -> %s by %s",
                occurrence_date,
                schedule_id,
                override.status.value,
                override.instructor,
            )
            return self._load(schedule_id)
