from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewStudent, Student


class StudentRepository(Protocol):
    def list_all(self, *, category: Optional[str] = None) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Student]:
        raise NotImplementedError

    def create(self, *, student: NewStudent) -> int:
        raise NotImplementedError

    def update(self, *, student_id: int, student: NewStudent) -> bool:
        raise NotImplementedError

    def delete(self, *, student_id: int) -> bool:
        raise NotImplementedError
