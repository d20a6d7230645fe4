from __future__ import annotations

from flask import Flask

from ..common.http import api_errors, json_body, ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _class_fields(body: dict) -> dict:
        categories = body.get("categories") or []
        if not isinstance(categories, list):
            raise ValidationError("categories must be a list")
        return {
            "name": body.get("name") or "",
            "description": body.get("description") or "",
            "categories": categories,
            "instructor": body.get("instructor") or "",
            "max_capacity": body.get("maxCapacity"),
            "duration_minutes": body.get("durationMinutes"),
        }

    @app.route("/api/classes", methods=["GET"], endpoint="api_classes_list")
    @api_errors
    def api_classes_list():
        return ok([c.to_dict() for c in container.class_service.list_all()])

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="api_class_get")
    @api_errors
    def api_class_get(class_id: int):
        return ok(container.class_service.get(class_id).to_dict())

    @app.route("/api/classes", methods=["POST"], endpoint="api_class_create")
    @api_errors
    def api_class_create():
        created = container.class_service.create(**_class_fields(json_body()))
        return ok(created.to_dict(), status=201, message="Class created")

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="api_class_update")
    @api_errors
    def api_class_update(class_id: int):
        updated = container.class_service.update(class_id, **_class_fields(json_body()))
        return ok(updated.to_dict(), message="Class updated")

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="api_class_delete")
    @api_errors
    def api_class_delete(class_id: int):
        container.class_service.delete(class_id)
        return ok(None, message="Class deleted")
