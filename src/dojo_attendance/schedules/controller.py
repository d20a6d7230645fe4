from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_date
from ..common.http import api_errors, current_identity, json_body, ok
from ..core.constants import DEFAULT_QUERY_DAYS
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _class_lookup() -> dict:
        return {c.class_id: c for c in container.class_service.list_all()}

    def _occurrence_json(occurrence, classes: dict) -> dict:
        data = occurrence.to_dict()
        cls = classes.get(occurrence.class_id)
        data["className"] = cls.name if cls else None
        data["classInstructor"] = cls.instructor if cls else None
        return data

    def _schedule_fields(body: dict) -> dict:
        if "classId" not in body:
            raise ValidationError("classId is required")
        try:
            class_id = int(body["classId"])
        except (TypeError, ValueError):
            raise ValidationError("Invalid class id")

        days = body.get("daysOfWeek") or []
        if not isinstance(days, list):
            raise ValidationError("daysOfWeek must be a list")

        end_raw = body.get("recurrenceEndDate")
        return {
            "class_id": class_id,
            "anchor_date": parse_iso_date(body.get("date") or "", "date"),
            "start_time": parse_hhmm(body.get("startTime") or "", "start time"),
            "end_time": parse_hhmm(body.get("endTime") or "", "end time"),
            "recurring": bool(body.get("recurring", False)),
            "days_of_week": days,
            "recurrence_end_date": parse_iso_date(end_raw, "recurrence end date") if end_raw else None,
            "status": body.get("status") or "scheduled",
        }

    @app.route("/api/schedules/occurrences", methods=["GET"], endpoint="api_schedule_occurrences")
    @api_errors
    def api_schedule_occurrences():
        today = now_local().date()
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        start = parse_iso_date(start_s, "start") if start_s else today
        end = parse_iso_date(end_s, "end") if end_s else start + timedelta(days=DEFAULT_QUERY_DAYS - 1)

        class_id = None
        class_id_s = request.args.get("class_id")
        if class_id_s:
            if not class_id_s.isdigit():
                raise ValidationError("Invalid class id")
            class_id = int(class_id_s)

        occurrences = container.schedule_expander.expand(start, end, class_id)
        classes = _class_lookup()
        return ok([_occurrence_json(o, classes) for o in occurrences])

    @app.route("/api/schedules/today", methods=["GET"], endpoint="api_schedules_today")
    @api_errors
    def api_schedules_today():
        occurrences = container.schedule_expander.for_day(now_local().date())
        classes = _class_lookup()
        return ok([_occurrence_json(o, classes) for o in occurrences])

    @app.route("/api/schedules/next", methods=["GET"], endpoint="api_schedules_next")
    @api_errors
    def api_schedules_next():
        occurrence = container.schedule_expander.next_upcoming(lookahead_days=container.next_class_lookahead_days)
        if occurrence is None:
            return ok(None, message="No upcoming classes")
        return ok(_occurrence_json(occurrence, _class_lookup()))

    @app.route("/api/schedules/<int:schedule_id>", methods=["GET"], endpoint="api_schedule_get")
    @api_errors
    def api_schedule_get(schedule_id: int):
        return ok(container.schedule_service.get(schedule_id).to_dict())

    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedule_create")
    @api_errors
    def api_schedule_create():
        created = container.schedule_service.create(**_schedule_fields(json_body()))
        return ok(created.to_dict(), status=201, message="Schedule created")

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="api_schedule_update")
    @api_errors
    def api_schedule_update(schedule_id: int):
        updated = container.schedule_service.update(schedule_id, **_schedule_fields(json_body()))
        return ok(updated.to_dict(), message="Schedule updated")

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="api_schedule_delete")
    @api_errors
    def api_schedule_delete(schedule_id: int):
        container.schedule_service.delete(schedule_id)
        return ok(None, message="Schedule deleted")

    @app.route(
        "/api/schedules/<int:schedule_id>/sessions/<session_date>",
        methods=["PUT"],
        endpoint="api_schedule_session_put",
    )
    @api_errors
    def api_schedule_session_put(schedule_id: int, session_date: str):
        body = json_body()
        updated = container.session_reconciler.apply_outcome(
            schedule_id,
            parse_iso_date(session_date, "session date"),
            body.get("instructor") or current_identity(),
            body.get("status"),
            body.get("notes") or "",
            schedule_status=body.get("scheduleStatus"),
        )
        return ok(updated.to_dict(), message="Session updated")
