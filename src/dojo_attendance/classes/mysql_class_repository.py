from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, join_csv, split_csv
from .model import ClassDefinition, NewClass
from .repository import ClassRepository


def _to_class(r: dict) -> ClassDefinition:
    return ClassDefinition(
        class_id=int(r["class_id"]),
        name=r["name"],
        description=r.get("description") or "",
        categories=tuple(split_csv(r.get("categories"))),
        instructor=r.get("instructor") or "",
        max_capacity=int(r.get("max_capacity") or 0),
        duration_minutes=int(r.get("duration_minutes") or 0),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ClassDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, name, description, categories, instructor, max_capacity, duration_minutes
                FROM classes
                ORDER BY name
                """
            )
            return [_to_class(r) for r in fetchall(cur)]

    def get_by_id(self, class_id: int) -> Optional[ClassDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, name, description, categories, instructor, max_capacity, duration_minutes
                FROM classes
                WHERE class_id=%s
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            return _to_class(r) if r else None

    def create(self, *, new_class: NewClass) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO classes(name, description, categories, instructor, max_capacity, duration_minutes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    new_class.name,
                    new_class.description,
                    join_csv(new_class.categories),
                    new_class.instructor,
                    int(new_class.max_capacity),
                    int(new_class.duration_minutes),
                ),
            )
            return int(cur.lastrowid)

    def update(self, *, class_id: int, new_class: NewClass) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classes
                SET name=%s, description=%s, categories=%s, instructor=%s, max_capacity=%s, duration_minutes=%s
                WHERE class_id=%s
                """,
                (
                    new_class.name,
                    new_class.description,
                    join_csv(new_class.categories),
                    new_class.instructor,
                    int(new_class.max_capacity),
                    int(new_class.duration_minutes),
                    int(class_id),
                ),
            )
            if cur.rowcount > 0:
                return True
            # Unchanged rows report 0 affected rows.
            cur.execute("SELECT class_id FROM classes WHERE class_id=%s", (int(class_id),))
            return fetchone(cur) is not None

    def delete(self, *, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount > 0
