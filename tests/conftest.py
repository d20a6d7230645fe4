from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from dojo_attendance.attendance.model import AttendanceRecord, AttendanceReportRow, NewAttendance
from dojo_attendance.classes.model import ClassDefinition, NewClass
from dojo_attendance.container import wire_container
from dojo_attendance.core.school_config import SchoolConfig
from dojo_attendance.main import create_app
from dojo_attendance.schedules.memory_schedule_repository import InMemoryScheduleRepository
from dojo_attendance.students.model import NewStudent, Student


class InMemoryClasses:
    def __init__(self):
        self.items: dict[int, ClassDefinition] = {}
        self._id = 0

    def list_all(self):
        return sorted(self.items.values(), key=lambda c: c.name)

    def get_by_id(self, class_id: int) -> Optional[ClassDefinition]:
        return self.items.get(class_id)

    def create(self, *, new_class: NewClass) -> int:
        self._id += 1
        self.items[self._id] = ClassDefinition(class_id=self._id, **vars(new_class))
        return self._id

    def update(self, *, class_id: int, new_class: NewClass) -> bool:
        if class_id not in self.items:
            return False
        self.items[class_id] = ClassDefinition(class_id=class_id, **vars(new_class))
        return True

    def delete(self, *, class_id: int) -> bool:
        return self.items.pop(class_id, None) is not None


class InMemoryStudents:
    def __init__(self):
        self.items: dict[int, Student] = {}
        self._id = 0

    def list_all(self, *, category=None):
        items = [s for s in self.items.values() if not category or category in s.categories]
        return sorted(items, key=lambda s: s.name)

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.items.get(student_id)

    def get_by_email(self, email: str) -> Optional[Student]:
        return next((s for s in self.items.values() if s.email == email), None)

    def create(self, *, student: NewStudent) -> int:
        self._id += 1
        self.items[self._id] = Student(student_id=self._id, registration_date=date(2025, 1, 1), **vars(student))
        return self._id

    def update(self, *, student_id: int, student: NewStudent) -> bool:
        if student_id not in self.items:
            return False
        current = self.items[student_id]
        self.items[student_id] = Student(
            student_id=student_id, registration_date=current.registration_date, **vars(student)
        )
        return True

    def delete(self, *, student_id: int) -> bool:
        return self.items.pop(student_id, None) is not None


class InMemoryAttendance:
    def __init__(self, students: InMemoryStudents):
        self._students = students
        self.items: dict[tuple[int, int, date], AttendanceRecord] = {}
        self._id = 0

    def upsert(self, *, attendance: NewAttendance, recorded_by: str, recorded_at: datetime) -> int:
        key = (attendance.student_id, attendance.schedule_id, attendance.session_date)
        existing = self.items.get(key)
        if existing:
            attendance_id = existing.attendance_id
        else:
            self._id += 1
            attendance_id = self._id
        self.items[key] = AttendanceRecord(
            attendance_id=attendance_id,
            recorded_by=recorded_by,
            recorded_at=recorded_at,
            **vars(attendance),
        )
        return attendance_id

    def _named(self, record: AttendanceRecord) -> AttendanceRecord:
        student = self._students.get_by_id(record.student_id)
        return replace(record, student_name=student.name if student else "")

    def list_for_session(self, *, schedule_id: int, session_date=None, category=None):
        out = [
            self._named(r)
            for r in self.items.values()
            if r.schedule_id == schedule_id
            and (session_date is None or r.session_date == session_date)
            and (not category or r.category == category)
        ]
        return sorted(out, key=lambda r: (r.student_name, r.session_date))

    def get_report_rows(self, *, start_date: date, end_date: date):
        out = []
        for r in self.items.values():
            if not start_date <= r.session_date <= end_date:
                continue
            student = self._students.get_by_id(r.student_id)
            out.append(
                AttendanceReportRow(
                    student_id=r.student_id,
                    student_name=student.name,
                    student_category=student.categories[0],
                    schedule_id=r.schedule_id,
                    session_date=r.session_date,
                    status=r.status,
                )
            )
        return out


@pytest.fixture
def school_config() -> SchoolConfig:
    return SchoolConfig.from_settings(
        ["kids", "youth", "adult", "advanced"],
        ["white", "yellow", "green", "black"],
    )


@pytest.fixture
def container(school_config):
    students = InMemoryStudents()
    return wire_container(
        classes_repo=InMemoryClasses(),
        schedules_repo=InMemoryScheduleRepository(),
        students_repo=students,
        attendance_repo=InMemoryAttendance(students),
        school_config=school_config,
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()
