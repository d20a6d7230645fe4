from __future__ import annotations

import logging
from datetime import date, datetime, time

import pytest

from dojo_attendance.core.enums import ClassStatus
from dojo_attendance.core.exceptions import ValidationError
from dojo_attendance.schedules.expander import ScheduleExpander
from dojo_attendance.schedules.memory_schedule_repository import InMemoryScheduleRepository


def _recurring(**overrides):
    doc = {
        "class_id": 1,
        "anchor_date": "2025-01-06",
        "start_time": "18:00",
        "end_time": "19:00",
        "recurring": True,
        "days_of_week": [1, 3],
        "recurrence_end_date": "2025-01-17",
        "status": "scheduled",
    }
    doc.update(overrides)
    return doc


def _single(**overrides):
    doc = {
        "class_id": 2,
        "anchor_date": "2025-02-01",
        "start_time": "10:00",
        "end_time": "11:00",
        "recurring": False,
        "status": "scheduled",
    }
    doc.update(overrides)
    return doc


class CountingRepo(InMemoryScheduleRepository):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def list_window_rows(self, **kwargs):
        self.calls += 1
        return super().list_window_rows(**kwargs)


def test_recurring_schedule_expands_to_matching_dates():
    repo = InMemoryScheduleRepository()
    schedule_id = repo.add_document(_recurring())

    occurrences = ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 1, 31))

    assert [o.occurrence_date for o in occurrences] == [
        date(2025, 1, 6),
        date(2025, 1, 8),
        date(2025, 1, 13),
        date(2025, 1, 15),
    ]
    assert all(o.schedule_id == schedule_id for o in occurrences)
    assert all(o.materialized_from_recurrence for o in occurrences)
    assert all(o.start_time == time(18, 0) for o in occurrences)


def test_override_applies_to_its_date_only():
    repo = InMemoryScheduleRepository()
    repo.add_document(
        _recurring(sessions=[{"session_date": "2025-01-08", "instructor": "Dana", "status": "completed", "notes": ""}])
    )

    by_date = {o.occurrence_date: o for o in ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 1, 31))}

    assert by_date[date(2025, 1, 8)].instructor == "Dana"
    assert by_date[date(2025, 1, 8)].status == ClassStatus.COMPLETED
    for d in (date(2025, 1, 6), date(2025, 1, 13), date(2025, 1, 15)):
        assert by_date[d].status == ClassStatus.SCHEDULED
        assert by_date[d].instructor is None


def test_recurring_occurrence_ignores_parent_status_without_override():
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring(status="completed"))

    occurrences = ScheduleExpander(repo).expand(date(2025, 1, 6), date(2025, 1, 6))

    assert occurrences[0].status == ClassStatus.SCHEDULED


def test_query_before_anchor_returns_nothing():
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring())

    assert ScheduleExpander(repo).expand(date(2024, 12, 1), date(2024, 12, 31)) == []


def test_single_schedule_on_one_day_range():
    repo = InMemoryScheduleRepository()
    repo.add_document(_single(status="cancelled"))

    occurrences = ScheduleExpander(repo).expand(date(2025, 2, 1), date(2025, 2, 1))

    assert len(occurrences) == 1
    assert occurrences[0].materialized_from_recurrence is False
    assert occurrences[0].status == ClassStatus.CANCELLED


def test_malformed_record_is_skipped_and_logged(caplog):
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring())
    bad_id = repo.add_document(_single(anchor_date="31/01/2025"))
    repo.add_document(_single())

    with caplog.at_level(logging.WARNING, logger="dojo_attendance.schedules.expander"):
        occurrences = ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 2, 28))

    assert {o.class_id for o in occurrences} == {1, 2}
    assert len(occurrences) == 5
    assert bad_id not in {o.schedule_id for o in occurrences}
    assert any(str(bad_id) in r.getMessage() for r in caplog.records)


def test_non_record_session_entry_skips_only_its_schedule(caplog):
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring())
    bad_id = repo.add_document(_recurring(class_id=9, sessions=["2025-01-08"]))

    with caplog.at_level(logging.WARNING, logger="dojo_attendance.schedules.expander"):
        occurrences = ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 1, 31))

    assert len(occurrences) == 4
    assert {o.class_id for o in occurrences} == {1}
    assert any(str(bad_id) in r.getMessage() for r in caplog.records)


def test_duplicate_overrides_keep_the_series_visible():
    repo = InMemoryScheduleRepository()
    repo.add_document(
        _recurring(
            sessions=[
                {"session_date": "2025-01-08", "instructor": "Kim", "status": "cancelled"},
                {"session_date": "2025-01-08", "instructor": "Dana", "status": "completed"},
            ]
        )
    )

    occurrences = ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 1, 31))

    assert [o.occurrence_date.day for o in occurrences] == [6, 8, 13, 15]
    assert occurrences[1].instructor == "Dana"
    assert occurrences[1].status == ClassStatus.COMPLETED


def test_output_sorted_by_date_then_start_time():
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring(start_time="19:00", end_time="20:00", recurrence_end_date=None))
    repo.add_document(_recurring(class_id=3, start_time="07:30", end_time="08:30", days_of_week=[1, 2, 3, 4, 5]))
    repo.add_document(_single(anchor_date="2025-01-08", start_time="12:00", end_time="13:00"))

    occurrences = ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 1, 31))

    keys = [o.sort_key for o in occurrences]
    assert keys == sorted(keys)
    assert [o.start_time for o in occurrences if o.occurrence_date == date(2025, 1, 8)] == [
        time(7, 30),
        time(12, 0),
        time(19, 0),
    ]


def test_equal_keys_keep_load_order():
    repo = InMemoryScheduleRepository()
    first = repo.add_document(_single(class_id=5))
    second = repo.add_document(_single(class_id=6))

    occurrences = ScheduleExpander(repo).expand(date(2025, 2, 1), date(2025, 2, 1))

    assert [o.schedule_id for o in occurrences] == [first, second]


def test_class_filter():
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring())
    repo.add_document(_single(anchor_date="2025-01-08"))

    occurrences = ScheduleExpander(repo).expand(date(2025, 1, 1), date(2025, 1, 31), class_id=2)

    assert [o.class_id for o in occurrences] == [2]


@pytest.mark.parametrize(
    "start,end,class_id",
    [
        (date(2025, 2, 1), date(2025, 1, 1), None),
        (date(2025, 1, 1), date(2026, 6, 1), None),
        (date(2025, 1, 1), date(2025, 1, 31), 0),
        ("2025-01-01", date(2025, 1, 31), None),
    ],
)
def test_bad_query_rejected_before_loading(start, end, class_id):
    repo = CountingRepo()

    with pytest.raises(ValidationError):
        ScheduleExpander(repo).expand(start, end, class_id)

    assert repo.calls == 0


def test_today_hides_finished_classes():
    repo = InMemoryScheduleRepository()
    repo.add_document(_single(anchor_date="2025-01-08", class_id=1))
    repo.add_document(_single(anchor_date="2025-01-08", class_id=2, status="completed"))

    expander = ScheduleExpander(repo)

    assert [o.class_id for o in expander.for_day(date(2025, 1, 8))] == [1]
    assert len(expander.for_day(date(2025, 1, 8), active_only=False)) == 2


def test_next_upcoming_prefers_later_today():
    repo = InMemoryScheduleRepository()
    repo.add_document(_recurring(recurrence_end_date=None))
    repo.add_document(_single(anchor_date="2025-01-06", start_time="20:00", end_time="21:00", class_id=9))

    expander = ScheduleExpander(repo)

    assert expander.next_upcoming(now=datetime(2025, 1, 6, 17, 45)).class_id == 1
    assert expander.next_upcoming(now=datetime(2025, 1, 6, 18, 30)).class_id == 9
    later = expander.next_upcoming(now=datetime(2025, 1, 6, 21, 0))
    assert later.occurrence_date == date(2025, 1, 8)


def test_next_upcoming_none_outside_lookahead():
    repo = InMemoryScheduleRepository()
    repo.add_document(_single(anchor_date="2025-03-01"))

    assert ScheduleExpander(repo).next_upcoming(now=datetime(2025, 1, 6, 9, 0), lookahead_days=14) is None
