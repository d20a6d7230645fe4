from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClassDefinition:
    """Domain entity: a class offered by the school (what is taught, by whom, for whom)."""

    class_id: int
    name: str
    description: str
    categories: tuple[str, ...]
    instructor: str
    max_capacity: int
    duration_minutes: int

    def to_dict(self) -> dict:
        return {
            "id": self.class_id,
            "name": self.name,
            "description": self.description,
            "categories": list(self.categories),
            "instructor": self.instructor,
            "maxCapacity": self.max_capacity,
            "durationMinutes": self.duration_minutes,
        }


@dataclass(frozen=True)
class NewClass:
    name: str
    description: str
    categories: tuple[str, ...]
    instructor: str
    max_capacity: int
    duration_minutes: int
