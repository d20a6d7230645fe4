from __future__ import annotations

import logging
from datetime import date, datetime, time

import pytest

from dojo_attendance.attendance.service import attendance_percentage
from dojo_attendance.classes.model import NewClass
from dojo_attendance.core.enums import AttendanceStatus, ClassStatus
from dojo_attendance.core.exceptions import ConcurrentUpdateConflict, NotFoundError, ValidationError
from dojo_attendance.schedules.model import NewSchedule, SessionOverride
from dojo_attendance.students.model import NewStudent


@pytest.fixture
def dojo(container):
    class_id = container.classes_repo.create(
        new_class=NewClass(
            name="Youth Karate",
            description="Kata and kumite",
            categories=("youth",),
            instructor="Sensei Ito",
            max_capacity=20,
            duration_minutes=60,
        )
    )
    weekly = container.schedules_repo.create(
        schedule=NewSchedule(
            class_id=class_id,
            anchor_date=date(2025, 1, 6),
            start_time=time(17, 0),
            end_time=time(18, 0),
            recurring=True,
            days_of_week=(1, 3),
            recurrence_end_date=date(2025, 3, 31),
        )
    )
    single = container.schedules_repo.create(
        schedule=NewSchedule(
            class_id=class_id,
            anchor_date=date(2025, 2, 1),
            start_time=time(10, 0),
            end_time=time(12, 0),
        )
    )
    students = [
        container.students_repo.create(
            student=NewStudent(name=name, email=f"{name.lower()}@example.com", categories=("youth",), belt_level="white")
        )
        for name in ("Aiko", "Ben", "Chen")
    ]
    return {"weekly": weekly, "single": single, "students": students}


def _entry(student_id, schedule_id, day="2025-01-08", status="present", **extra):
    return {"student_id": student_id, "schedule_id": schedule_id, "date": day, "status": status, "category": "youth", **extra}


def test_mark_stores_entries_and_completes_session(container, dojo):
    a, b, c = dojo["students"]

    outcome = container.attendance_service.mark(
        [_entry(a, dojo["weekly"]), _entry(b, dojo["weekly"], status="late"), _entry(c, dojo["weekly"], status="absent")],
        "coach.kim",
    )

    assert all(r.success for r in outcome.results)
    assert outcome.reconciled == [(dojo["weekly"], date(2025, 1, 8))]
    definition = container.schedules_repo.get_by_id(dojo["weekly"])
    session = definition.session_for(date(2025, 1, 8))
    assert (session.instructor, session.status) == ("coach.kim", ClassStatus.COMPLETED)
    # The recurring definition itself stays scheduled.
    assert definition.status == ClassStatus.SCHEDULED


def test_single_class_is_completed_as_a_whole(container, dojo):
    a = dojo["students"][0]

    container.attendance_service.mark([_entry(a, dojo["single"], day="2025-02-01")], "coach.kim", instructor="Sensei Ito")

    definition = container.schedules_repo.get_by_id(dojo["single"])
    assert definition.status == ClassStatus.COMPLETED
    assert definition.sessions[0].instructor == "Sensei Ito"


def test_bad_entry_fails_alone(container, dojo):
    a, b, _ = dojo["students"]

    outcome = container.attendance_service.mark(
        [
            _entry(a, dojo["weekly"]),
            _entry(999, dojo["weekly"]),
            _entry(b, dojo["weekly"], day="2025-01-07"),
            _entry(b, dojo["weekly"], status="sleeping"),
            _entry(b, dojo["weekly"], category="seniors"),
            "not an object",
        ],
        "coach.kim",
    )

    assert [r.success for r in outcome.results] == [True, False, False, False, False, False]
    assert "999" in outcome.results[1].error
    assert len(container.attendance_repo.items) == 1


def test_remarking_replaces_record(container, dojo):
    a = dojo["students"][0]
    svc = container.attendance_service

    first = svc.mark([_entry(a, dojo["weekly"], status="absent")], "coach.kim")
    second = svc.mark([_entry(a, dojo["weekly"], status="present", notes="arrived")], "coach.lee")

    assert first.results[0].attendance_id == second.results[0].attendance_id
    records = svc.for_session(dojo["weekly"], date(2025, 1, 8))
    assert len(records) == 1
    assert records[0].status == AttendanceStatus.PRESENT
    assert records[0].recorded_by == "coach.lee"
    assert len(container.schedules_repo.get_by_id(dojo["weekly"]).sessions) == 1


def test_existing_session_notes_kept_unless_given(container, dojo):
    a = dojo["students"][0]
    container.schedules_repo.apply_session(
        schedule_id=dojo["weekly"],
        override=SessionOverride(date(2025, 1, 8), "Sensei Ito", ClassStatus.IN_PROGRESS, "mat 2"),
    )

    container.attendance_service.mark([_entry(a, dojo["weekly"])], "coach.kim")
    assert container.schedules_repo.get_by_id(dojo["weekly"]).session_for(date(2025, 1, 8)).notes == "mat 2"

    container.attendance_service.mark([_entry(a, dojo["weekly"])], "coach.kim", session_notes="great class")
    assert container.schedules_repo.get_by_id(dojo["weekly"]).session_for(date(2025, 1, 8)).notes == "great class"


def test_session_update_failure_keeps_attendance(container, dojo, monkeypatch, caplog):
    a = dojo["students"][0]

    def conflict(*args, **kwargs):
        raise ConcurrentUpdateConflict("busy")

    monkeypatch.setattr(container.session_reconciler, "apply_outcome", conflict)

    with caplog.at_level(logging.WARNING, logger="dojo_attendance.attendance.service"):
        outcome = container.attendance_service.mark([_entry(a, dojo["weekly"])], "coach.kim")

    assert outcome.results[0].success
    assert outcome.reconciled == []
    assert outcome.reconcile_failures == [(dojo["weekly"], date(2025, 1, 8), "busy")]
    assert len(container.attendance_repo.items) == 1
    assert "not updated" in caplog.text


def test_mark_requires_entries_and_recorder(container):
    with pytest.raises(ValidationError):
        container.attendance_service.mark([], "coach.kim")
    with pytest.raises(ValidationError):
        container.attendance_service.mark([{"student_id": 1}], " ")


def test_for_session_filters(container, dojo):
    a, b, _ = dojo["students"]
    svc = container.attendance_service
    svc.mark([_entry(a, dojo["weekly"]), _entry(b, dojo["weekly"], day="2025-01-13")], "coach.kim")

    assert len(svc.for_session(dojo["weekly"])) == 2
    assert [r.student_name for r in svc.for_session(dojo["weekly"], date(2025, 1, 13))] == ["Ben"]
    assert svc.for_session(dojo["weekly"], category="kids") == []
    with pytest.raises(NotFoundError):
        svc.for_session(12345)
    with pytest.raises(ValidationError):
        svc.for_session(dojo["weekly"], category="seniors")


def test_report_summarises_per_student(container, dojo):
    a, b, _ = dojo["students"]
    svc = container.attendance_service
    svc.mark(
        [
            _entry(a, dojo["weekly"], day="2025-01-06"),
            _entry(a, dojo["weekly"], day="2025-01-08", status="late"),
            _entry(a, dojo["weekly"], day="2025-01-13", status="absent"),
            _entry(b, dojo["weekly"], day="2025-01-06", status="late"),
            _entry(b, dojo["weekly"], day="2025-02-03"),
        ],
        "coach.kim",
    )

    data = svc.report(date(2025, 1, 1), date(2025, 1, 31))

    assert [s["student_name"] for s in data.summary] == ["Aiko", "Ben"]
    aiko, ben = data.summary
    assert (aiko["present"], aiko["late"], aiko["absent"], aiko["total_classes"]) == (1, 1, 1, 3)
    assert aiko["attendance_percentage"] == 50.0
    assert ben["attendance_percentage"] == 50.0
    assert len(data.rows) == 4

    with pytest.raises(ValidationError):
        svc.report(date(2025, 2, 1), date(2025, 1, 1))


def test_attendance_percentage():
    assert attendance_percentage(2, 1, 3) == 83.33
    assert attendance_percentage(0, 0, 0) == 0.0


def test_search_past_lists_held_classes_newest_first(container, dojo):
    found = container.attendance_service.search_past(now=datetime(2025, 1, 15, 17, 30))

    assert [p.occurrence.occurrence_date.day for p in found] == [15, 13, 8, 6]
    assert found[0].class_def.name == "Youth Karate"
    assert found[0].to_dict()["classInstructor"] == "Sensei Ito"


def test_search_past_leaves_out_classes_not_yet_started(container, dojo):
    found = container.attendance_service.search_past(now=datetime(2025, 1, 15, 16, 0))

    assert [p.occurrence.occurrence_date.day for p in found] == [13, 8, 6]


def test_search_past_for_one_day(container, dojo):
    found = container.attendance_service.search_past(date(2025, 2, 1), now=datetime(2025, 1, 1, 9, 0))

    assert [p.occurrence.schedule_id for p in found] == [dojo["single"]]


def test_search_past_filters_by_instructor_and_category(container, dojo):
    container.session_reconciler.apply_outcome(dojo["weekly"], date(2025, 1, 8), "Dana", "completed")
    search = container.attendance_service.search_past
    now = datetime(2025, 1, 15, 20, 0)

    assert [p.occurrence.occurrence_date for p in search(instructor="dana", now=now)] == [date(2025, 1, 8)]
    assert len(search(instructor=" sensei ito ", now=now)) == 4
    assert search(instructor="Kim", now=now) == []
    assert len(search(category="youth", now=now)) == 4
    assert search(category="kids", now=now) == []
    with pytest.raises(ValidationError):
        search(category="ninjas", now=now)


def test_search_past_drops_classes_that_no_longer_exist(container, dojo):
    class_id = container.schedules_repo.get_by_id(dojo["weekly"]).class_id
    container.classes_repo.delete(class_id=class_id)

    assert container.attendance_service.search_past(now=datetime(2025, 1, 15, 20, 0)) == []
