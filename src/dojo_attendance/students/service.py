from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..core.school_config import SchoolConfig
from .model import NewStudent, Student
from .repository import StudentRepository

_EMAIL = re.compile(r"^\S+@\S+\.\S+$")
_PHONE = re.compile(r"^[0-9+\-\s()]*$")


class StudentService:
    def __init__(self, students: StudentRepository, school_config: SchoolConfig):
        self._students = students
        self._config = school_config

    def list_all(self, *, category: Optional[str] = None) -> Sequence[Student]:
        if category and not self._config.is_valid_category(category):
            raise ValidationError(f"Invalid category: {category}")
        return self._students.list_all(category=category or None)

    def get(self, student_id: int) -> Student:
        found = self._students.get_by_id(int(student_id))
        if not found:
            raise NotFoundError(f"Student {student_id} not found")
        return found

    def _validate(
        self,
        *,
        name: str,
        email: str,
        categories: Iterable[str],
        belt_level: str,
        phone: str = "",
        emergency_contact_name: str = "",
        emergency_contact_phone: str = "",
        is_active: bool = True,
        current_id: Optional[int] = None,
    ) -> NewStudent:
        name = require_non_empty(name, "Name")
        if len(name) < 2 or len(name) > 100:
            raise ValidationError("Name must be 2 to 100 characters long")

        email = require_non_empty(email, "Email").lower()
        if not _EMAIL.match(email):
            raise ValidationError("Please enter a valid email address")
        existing = self._students.get_by_email(email)
        if existing and existing.student_id != current_id:
            raise ValidationError("Email already exists")

        cats = tuple(dict.fromkeys(c.strip() for c in (categories or ()) if c and c.strip()))
        if not cats:
            raise ValidationError("At least one category is required")
        for c in cats:
            if not self._config.is_valid_category(c):
                raise ValidationError(
                    f"Invalid category: {c}. Must be one of: {', '.join(self._config.category_values())}"
                )

        belt_level = require_non_empty(belt_level, "Belt level")
        if not self._config.is_valid_belt_level(belt_level):
            raise ValidationError(
                f"Invalid belt level: {belt_level}. Must be one of: {', '.join(self._config.belt_level_values())}"
            )

        for value, label in ((phone, "Phone"), (emergency_contact_phone, "Emergency contact phone")):
            if not _PHONE.match(value or ""):
                raise ValidationError(f"{label} may only contain digits, spaces and + - ( )")

        return NewStudent(
            name=name,
            email=email,
            categories=cats,
            belt_level=belt_level,
            phone=(phone or "").strip(),
            emergency_contact_name=(emergency_contact_name or "").strip(),
            emergency_contact_phone=(emergency_contact_phone or "").strip(),
            is_active=bool(is_active),
        )

    def create(self, **fields) -> Student:
        student_id = self._students.create(student=self._validate(**fields))
        return self.get(student_id)

    def update(self, student_id: int, **fields) -> Student:
        self.get(student_id)
        student = self._validate(current_id=int(student_id), **fields)
        if not self._students.update(student_id=int(student_id), student=student):
            raise NotFoundError(f"Student {student_id} not found")
        return self.get(student_id)

    def delete(self, student_id: int) -> None:
        if not self._students.delete(student_id=int(student_id)):
            raise NotFoundError(f"Student {student_id} not found")
