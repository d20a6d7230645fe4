from __future__ import annotations

import csv
import io
from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import api_errors, current_identity, json_body, ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _report_range():
        today = now_local().date()
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        start = parse_iso_date(start_s, "start") if start_s else today - timedelta(days=30)
        end = parse_iso_date(end_s, "end") if end_s else today
        return start, end

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @api_errors
    def api_attendance_mark():
        body = json_body()
        entries = body.get("attendance")
        if not isinstance(entries, list):
            raise ValidationError("attendance must be a list of entries")

        outcome = container.attendance_service.mark(
            entries,
            current_identity(),
            instructor=body.get("instructor") or None,
            session_notes=body.get("sessionNotes"),
        )
        saved = sum(1 for r in outcome.results if r.success)
        return ok(outcome.to_dict(), message=f"Attendance saved for {saved} of {len(outcome.results)} students")

    @app.route("/api/attendance/schedule/<int:schedule_id>", methods=["GET"], endpoint="api_attendance_for_session")
    @api_errors
    def api_attendance_for_session(schedule_id: int):
        date_s = request.args.get("date")
        records = container.attendance_service.for_session(
            schedule_id,
            parse_iso_date(date_s, "date") if date_s else None,
            request.args.get("category") or None,
        )
        return ok([r.to_dict() for r in records])

    @app.route("/api/attendance/reports", methods=["GET"], endpoint="api_attendance_reports")
    @api_errors
    def api_attendance_reports():
        start, end = _report_range()
        data = container.attendance_service.report(start, end)
        return ok({"start": start.isoformat(), "end": end.isoformat(), "summary": data.summary, "rows": data.rows})

    @app.route("/api/attendance/reports.csv", methods=["GET"], endpoint="api_attendance_reports_csv")
    @api_errors
    def api_attendance_reports_csv():
        start, end = _report_range()
        data = container.attendance_service.report(start, end)

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "student_id",
                "student_name",
                "category",
                "total_classes",
                "present",
                "absent",
                "late",
                "attendance_percentage",
            ],
        )
        writer.writeheader()
        for row in data.summary:
            writer.writerow(row)

        filename = f"attendance_{start.isoformat()}_{end.isoformat()}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/search", methods=["GET"], endpoint="api_attendance_search")
    @api_errors
    def api_attendance_search():
        date_s = request.args.get("date")
        classes = container.attendance_service.search_past(
            parse_iso_date(date_s, "date") if date_s else None,
            request.args.get("instructor") or None,
            request.args.get("category") or None,
        )
        return ok([c.to_dict() for c in classes])
