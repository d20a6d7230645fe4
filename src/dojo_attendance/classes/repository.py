from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassDefinition, NewClass


class ClassRepository(Protocol):
    def list_all(self) -> Sequence[ClassDefinition]:
        raise NotImplementedError

    def get_by_id(self, class_id: int) -> Optional[ClassDefinition]:
        raise NotImplementedError

    def create(self, *, new_class: NewClass) -> int:
        raise NotImplementedError

    def update(self, *, class_id: int, new_class: NewClass) -> bool:
        raise NotImplementedError

    def delete(self, *, class_id: int) -> bool:
        raise NotImplementedError
