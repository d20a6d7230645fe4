"""Calendar arithmetic behind recurring schedules.

Two pure building blocks used by the expander:

- ``enumerate_dates`` walks the intersection of a schedule's recurrence window
  and a query window, yielding the dates that fall on the schedule's weekdays.
- ``resolve_session`` picks the effective instructor/status/notes of one
  occurrence from the schedule's stored per-date overrides.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional

from ..core.enums import ClassStatus, civil_weekday
from .model import SessionOverride

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class OccurrenceWindow:
    """Finite, restartable sequence of matching dates in ascending order.

    Every ``iter()`` starts a fresh walk; nothing is materialized up front.
    """

    first: date
    last: date
    days_of_week: frozenset[int]

    def __iter__(self) -> Iterator[date]:
        if not self.days_of_week:
            return
        day = self.first
        while day <= self.last:
            if civil_weekday(day) in self.days_of_week:
                yield day
            day += _ONE_DAY


def enumerate_dates(
    anchor_date: date,
    range_start: date,
    range_end: date,
    days_of_week: Iterable[int],
    recurrence_end: Optional[date],
) -> OccurrenceWindow:
    """Dates in ``[anchor, recurrence_end] ∩ [range_start, range_end]`` on the given weekdays.

    An empty intersection or an empty weekday set gives an empty window.
    ``recurrence_end=None`` leaves the recurrence open-ended.
    """

    first = max(anchor_date, range_start)
    last = range_end if recurrence_end is None else min(recurrence_end, range_end)
    return OccurrenceWindow(first=first, last=last, days_of_week=frozenset(days_of_week))


@dataclass(frozen=True)
class EffectiveSession:
    instructor: Optional[str]
    status: ClassStatus
    notes: str
    overridden: bool = False


def resolve_session(
    occurrence_date: date,
    sessions: Iterable[SessionOverride],
    default_status: ClassStatus = ClassStatus.SCHEDULED,
) -> EffectiveSession:
    for s in sessions:
        if s.session_date == occurrence_date:
            return EffectiveSession(
                instructor=s.instructor or None,
                status=s.status or default_status,
                notes=s.notes or "",
                overridden=True,
            )
    return EffectiveSession(instructor=None, status=default_status, notes="")
