from __future__ import annotations

import csv
import io
import logging

from flask import Flask, flash, jsonify, redirect, request, url_for

from ..common.datetime_utils import parse_iso_date, today_local
from ..common.web import flash_failure, json_error, login_required, teacher_required
from ..container import Container
from ..core.exceptions import DomainError
from .model import AttendanceRecord

logger = logging.getLogger(__name__)


def _record_json(r: AttendanceRecord) -> dict:
    return {"id": r.id, "student_id": r.student_id, "date": r.date.strftime("%Y-%m-%d"), "status": r.status.value}


def register(app: Flask, container: Container) -> None:
    @app.route("/teacher/attendance", methods=["POST"], endpoint="attendance_mark")
    @teacher_required
    def attendance_mark():
        date_s = request.form.get("date") or today_local().strftime("%Y-%m-%d")
        try:
            container.attendance_service.mark(
                student_id=request.form.get("student_id", ""),
                on_date=parse_iso_date(date_s),
                status=request.form.get("status", ""),
            )
            flash("Attendance marked successfully", "success")
        except DomainError as e:
            flash_failure(e, "Failed to mark attendance")
        except Exception:
            logger.exception("Unexpected error while marking attendance")
            flash("Failed to mark attendance", "danger")
        return redirect(url_for("dashboard", tab="attendance", date=date_s))

    @app.route("/teacher/attendance.csv", methods=["GET"], endpoint="attendance_export")
    @teacher_required
    def attendance_export():
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        if not start_s or not end_s:
            flash("Missing start/end parameters", "warning")
            return redirect(url_for("dashboard", tab="attendance"))

        try:
            start = parse_iso_date(start_s)
            end = parse_iso_date(end_s)
            rows = container.attendance_service.export_rows(start=start, end=end)
        except DomainError as e:
            flash_failure(e, "Failed to export attendance")
            return redirect(url_for("dashboard", tab="attendance"))

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=["date", "student_id", "student_name", "status"])
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    # ===== JSON =====

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance")
    @login_required
    def api_attendance():
        """Own attendance for students; ``?date=`` gives a teacher's roster grid."""
        try:
            if request.args.get("date"):
                on_date = parse_iso_date(request.args["date"])
                roster = container.attendance_service.roster_for_date(on_date)
                return jsonify(
                    {
                        "success": True,
                        "date": on_date.strftime("%Y-%m-%d"),
                        "roster": [
                            {"student_id": r.student_id, "name": r.name, "status": r.status.value if r.status else None}
                            for r in roster
                        ],
                    }
                )
            records = container.attendance_service.my_attendance()
            return jsonify({"success": True, "attendance": [_record_json(r) for r in records]})
        except Exception as e:
            if not isinstance(e, DomainError):
                logger.exception("Unexpected error while fetching attendance")
            return json_error(e, "Failed to fetch attendance")

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="api_attendance_summary")
    @login_required
    def api_attendance_summary():
        try:
            s = container.attendance_service.my_summary()
            return jsonify(
                {
                    "success": True,
                    "pie": {"present": s.present, "absent": s.absent},
                    "percent": {"present": s.present_percent, "absent": s.absent_percent},
                    "total": s.total,
                }
            )
        except Exception as e:
            if not isinstance(e, DomainError):
                logger.exception("Unexpected error while building attendance summary")
            return json_error(e, "Failed to fetch attendance")

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @login_required
    def api_attendance_mark():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            data = {}
        try:
            on_date = parse_iso_date(data["date"]) if data.get("date") else today_local()
            record = container.attendance_service.mark(
                student_id=data.get("student_id", ""),
                on_date=on_date,
                status=data.get("status", ""),
            )
            return jsonify({"success": True, "attendance": _record_json(record)})
        except Exception as e:
            if not isinstance(e, DomainError):
                logger.exception("Unexpected error while marking attendance")
            return json_error(e, "Failed to mark attendance")
