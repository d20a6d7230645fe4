from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.validators import require_enum, require_time_range, require_weekdays
from ..core.enums import ClassStatus, civil_weekday
from ..core.exceptions import NotFoundError, ValidationError
from .model import NewSchedule, ScheduleDefinition
from .repository import ScheduleRepository


class ScheduleService:
    """Authoring use cases for schedule definitions."""

    def __init__(self, schedules: ScheduleRepository, classes: ClassRepository):
        self._schedules = schedules
        self._classes = classes

    def get(self, schedule_id: int) -> ScheduleDefinition:
        definition = self._schedules.get_by_id(int(schedule_id))
        if not definition:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return definition

    def _validate(
        self,
        *,
        class_id: int,
        anchor_date: date,
        start_time: time,
        end_time: time,
        recurring: bool = False,
        days_of_week: Optional[Sequence[int]] = None,
        recurrence_end_date: Optional[date] = None,
        status: ClassStatus = ClassStatus.SCHEDULED,
    ) -> NewSchedule:
        if int(class_id) <= 0:
            raise ValidationError("Invalid class id")
        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError(f"Class {class_id} not found")

        require_time_range(start_time, end_time)

        if not recurring:
            return NewSchedule(
                class_id=int(class_id),
                anchor_date=anchor_date,
                start_time=start_time,
                end_time=end_time,
                status=require_enum(status, ClassStatus, "status"),
            )

        days = require_weekdays(list(days_of_week or ()))
        if recurrence_end_date is None:
            raise ValidationError("A recurring schedule needs a recurrence end date")
        if recurrence_end_date < anchor_date:
            raise ValidationError("Recurrence end date must be on or after the start date")
        if civil_weekday(anchor_date) not in days:
            raise ValidationError("The first class date must fall on one of the selected days")

        return NewSchedule(
            class_id=int(class_id),
            anchor_date=anchor_date,
            start_time=start_time,
            end_time=end_time,
            recurring=True,
            days_of_week=days,
            recurrence_end_date=recurrence_end_date,
            status=require_enum(status, ClassStatus, "status"),
        )

    def create(self, **fields) -> ScheduleDefinition:
        schedule_id = self._schedules.create(schedule=self._validate(**fields))
        return self.get(schedule_id)

    def update(self, schedule_id: int, **fields) -> ScheduleDefinition:
        """Replace timing and recurrence; recorded session overrides are kept as they are."""

        self.get(schedule_id)
        if not self._schedules.update(schedule_id=int(schedule_id), schedule=self._validate(**fields)):
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return self.get(schedule_id)

    def delete(self, schedule_id: int) -> None:
        # Attendance rows for the schedule are removed by the database (ON DELETE CASCADE).
        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise NotFoundError(f"Schedule {schedule_id} not found")
