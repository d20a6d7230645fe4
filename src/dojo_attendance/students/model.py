from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: an enrolled student."""

    student_id: int
    name: str
    email: str
    categories: tuple[str, ...]
    belt_level: str
    phone: str = ""
    emergency_contact_name: str = ""
    emergency_contact_phone: str = ""
    registration_date: Optional[date] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "name": self.name,
            "email": self.email,
            "categories": list(self.categories),
            "beltLevel": self.belt_level,
            "phone": self.phone,
            "emergencyContact": {"name": self.emergency_contact_name, "phone": self.emergency_contact_phone},
            "registrationDate": self.registration_date.isoformat() if self.registration_date else None,
            "status": "active" if self.is_active else "inactive",
        }


@dataclass(frozen=True)
class NewStudent:
    name: str
    email: str
    categories: tuple[str, ...]
    belt_level: str
    phone: str = ""
    emergency_contact_name: str = ""
    emergency_contact_phone: str = ""
    is_active: bool = True
