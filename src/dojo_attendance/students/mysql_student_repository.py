from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, join_csv, split_csv
from .model import NewStudent, Student
from .repository import StudentRepository

_COLUMNS = """
    student_id, name, email, categories, belt_level, phone,
    emergency_contact_name, emergency_contact_phone, registration_date, is_active
"""


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        name=r["name"],
        email=r["email"],
        categories=tuple(split_csv(r.get("categories"))),
        belt_level=r.get("belt_level") or "",
        phone=r.get("phone") or "",
        emergency_contact_name=r.get("emergency_contact_name") or "",
        emergency_contact_phone=r.get("emergency_contact_phone") or "",
        registration_date=r.get("registration_date"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self, *, category: Optional[str] = None) -> Sequence[Student]:
        where = ""
        params: tuple = ()
        if category:
            where = "WHERE FIND_IN_SET(%s, categories) > 0"
            params = (category,)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students {where} ORDER BY name", params)
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_email(self, email: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE email=%s", (email,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    @staticmethod
    def _values(student: NewStudent) -> tuple:
        return (
            student.name,
            student.email,
            join_csv(student.categories),
            student.belt_level,
            student.phone,
            student.emergency_contact_name,
            student.emergency_contact_phone,
            1 if student.is_active else 0,
        )

    def create(self, *, student: NewStudent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    name, email, categories, belt_level, phone,
                    emergency_contact_name, emergency_contact_phone, is_active, registration_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,CURDATE())
                """,
                self._values(student),
            )
            return int(cur.lastrowid)

    def update(self, *, student_id: int, student: NewStudent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET name=%s, email=%s, categories=%s, belt_level=%s, phone=%s,
                    emergency_contact_name=%s, emergency_contact_phone=%s, is_active=%s
                WHERE student_id=%s
                """,
                self._values(student) + (int(student_id),),
            )
            if cur.rowcount > 0:
                return True
            # Unchanged rows report 0 affected rows.
            cur.execute("SELECT student_id FROM students WHERE student_id=%s", (int(student_id),))
            return fetchone(cur) is not None

    def delete(self, *, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0
