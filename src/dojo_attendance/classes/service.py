from __future__ import annotations

from typing import Iterable, Sequence

from ..common.validators import require_int_range, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..core.school_config import SchoolConfig
from .model import ClassDefinition, NewClass
from .repository import ClassRepository


class ClassService:
    def __init__(self, classes: ClassRepository, school_config: SchoolConfig):
        self._classes = classes
        self._config = school_config

    def list_all(self) -> Sequence[ClassDefinition]:
        return self._classes.list_all()

    def get(self, class_id: int) -> ClassDefinition:
        found = self._classes.get_by_id(int(class_id))
        if not found:
            raise NotFoundError(f"Class {class_id} not found")
        return found

    def _validate(
        self,
        *,
        name: str,
        description: str,
        categories: Iterable[str],
        instructor: str,
        max_capacity,
        duration_minutes,
    ) -> NewClass:
        name = require_non_empty(name, "Class name")
        if len(name) < 3 or len(name) > 100:
            raise ValidationError("Class name must be 3 to 100 characters long")

        cats = tuple(dict.fromkeys(c.strip() for c in (categories or ()) if c and c.strip()))
        if not cats:
            raise ValidationError("At least one category is required")
        for c in cats:
            if not self._config.is_valid_category(c):
                raise ValidationError(
                    f"Invalid category: {c}. Must be one of: {', '.join(self._config.category_values())}"
                )

        return NewClass(
            name=name,
            description=require_non_empty(description, "Description"),
            categories=cats,
            instructor=require_non_empty(instructor, "Instructor"),
            max_capacity=require_int_range(max_capacity, "Maximum capacity", 1, 100),
            duration_minutes=require_int_range(duration_minutes, "Class duration", 15, 240),
        )

    def create(self, **fields) -> ClassDefinition:
        class_id = self._classes.create(new_class=self._validate(**fields))
        return self.get(class_id)

    def update(self, class_id: int, **fields) -> ClassDefinition:
        if not self._classes.update(class_id=int(class_id), new_class=self._validate(**fields)):
            raise NotFoundError(f"Class {class_id} not found")
        return self.get(class_id)

    def delete(self, class_id: int) -> None:
        # Schedules, their sessions and attendance go with the class (ON DELETE CASCADE).
        if not self._classes.delete(class_id=int(class_id)):
            raise NotFoundError(f"Class {class_id} not found")
