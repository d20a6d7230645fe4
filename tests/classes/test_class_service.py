from __future__ import annotations

import pytest

from dojo_attendance.core.exceptions import NotFoundError, ValidationError


def _fields(**overrides):
    fields = dict(
        name="Adult Judo",
        description="Throws and groundwork",
        categories=["adult", "advanced", "adult"],
        instructor="Sensei Mori",
        max_capacity="25",
        duration_minutes=90,
    )
    fields.update(overrides)
    return fields


def test_create_and_update(container):
    svc = container.class_service

    created = svc.create(**_fields())
    assert created.categories == ("adult", "advanced")
    assert created.max_capacity == 25

    updated = svc.update(created.class_id, **_fields(instructor="Sensei Abe"))
    assert updated.instructor == "Sensei Abe"
    assert [c.name for c in svc.list_all()] == ["Adult Judo"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": "Ju"},
        {"categories": []},
        {"categories": ["seniors"]},
        {"max_capacity": 0},
        {"max_capacity": 101},
        {"max_capacity": "many"},
        {"duration_minutes": 10},
        {"duration_minutes": 241},
        {"instructor": ""},
        {"description": "  "},
    ],
)
def test_invalid_classes_rejected(container, overrides):
    with pytest.raises(ValidationError):
        container.class_service.create(**_fields(**overrides))


def test_missing_class(container):
    with pytest.raises(NotFoundError):
        container.class_service.get(5)
    with pytest.raises(NotFoundError):
        container.class_service.update(5, **_fields())
    with pytest.raises(NotFoundError):
        container.class_service.delete(5)
