from __future__ import annotations

from flask import Flask, request

from ..common.http import api_errors, json_body, ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _student_fields(body: dict) -> dict:
        categories = body.get("categories") or []
        if not isinstance(categories, list):
            raise ValidationError("categories must be a list")
        contact = body.get("emergencyContact") or {}
        if not isinstance(contact, dict):
            raise ValidationError("emergencyContact must be an object")
        return {
            "name": body.get("name") or "",
            "email": body.get("email") or "",
            "categories": categories,
            "belt_level": body.get("beltLevel") or "",
            "phone": body.get("phone") or "",
            "emergency_contact_name": contact.get("name") or "",
            "emergency_contact_phone": contact.get("phone") or "",
            "is_active": body.get("status", "active") != "inactive",
        }

    @app.route("/api/students", methods=["GET"], endpoint="api_students_list")
    @api_errors
    def api_students_list():
        students = container.student_service.list_all(category=request.args.get("category"))
        return ok([s.to_dict() for s in students])

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="api_student_get")
    @api_errors
    def api_student_get(student_id: int):
        return ok(container.student_service.get(student_id).to_dict())

    @app.route("/api/students", methods=["POST"], endpoint="api_student_create")
    @api_errors
    def api_student_create():
        created = container.student_service.create(**_student_fields(json_body()))
        return ok(created.to_dict(), status=201, message="Student created")

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="api_student_update")
    @api_errors
    def api_student_update(student_id: int):
        updated = container.student_service.update(student_id, **_student_fields(json_body()))
        return ok(updated.to_dict(), message="Student updated")

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="api_student_delete")
    @api_errors
    def api_student_delete(student_id: int):
        container.student_service.delete(student_id)
        return ok(None, message="Student deleted")
