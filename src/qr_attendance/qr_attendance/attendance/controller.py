from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.web import admin_required, error_response, login_required
from ..container import Container
from .breaks import break_to_dict
from .model import AttendanceReportRow


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def report_row_to_dict(row: AttendanceReportRow) -> dict:
    return {
        "id": row.attendance_id,
        "staff_id": row.staff_id,
        "staff_name": row.staff_name,
        "department": row.department,
        "date": row.work_date.isoformat(),
        "check_in": _iso(row.check_in_time),
        "check_out": _iso(row.check_out_time),
        "breaks": [break_to_dict(b) for b in row.breaks],
    }


def _staff_id_from_body() -> Optional[str]:
    data = request.get_json(silent=True) or {}
    value = data.get("staffId")
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def register(app: Flask, container: Container) -> None:
    @app.route("/api/checkin", methods=["POST"], endpoint="api_checkin")
    @login_required
    def checkin():
        staff_id = _staff_id_from_body()
        if not staff_id:
            return error_response("Staff ID is required", 400)

        container.attendance_service.check_in(staff_id)
        return jsonify({"success": True, "message": "Check-in successful"})

    @app.route("/api/checkout", methods=["POST"], endpoint="api_checkout")
    @login_required
    def checkout():
        staff_id = _staff_id_from_body()
        if not staff_id:
            return error_response("Staff ID is required", 400)

        result = container.attendance_service.check_out(staff_id)
        if result.breaks_auto_ended:
            message = f"{result.staff_name} checked out (active break was auto-ended)"
        else:
            message = f"{result.staff_name} checked out successfully"
        return jsonify({"success": True, "message": message, "breaks_auto_ended": result.breaks_auto_ended})

    @app.route("/api/attendance/break/start", methods=["POST"], endpoint="api_break_start")
    @admin_required
    def break_start():
        staff_id = _staff_id_from_body()
        if not staff_id:
            return error_response("Staff ID is required", 400)

        result = container.break_service.start_break(staff_id)
        return jsonify(
            {
                "success": True,
                "message": f"{result.staff_name} started break",
                "break_start": result.break_start.isoformat(),
            }
        )

    @app.route("/api/attendance/break/end", methods=["POST"], endpoint="api_break_end")
    @admin_required
    def break_end():
        staff_id = _staff_id_from_body()
        if not staff_id:
            return error_response("Staff ID is required", 400)

        result = container.break_service.end_break(staff_id)
        return jsonify(
            {
                "success": True,
                "message": f"{result.staff_name} ended break ({result.duration_minutes} minutes)",
                "break_end": result.break_end.isoformat(),
                "break_duration_minutes": result.duration_minutes,
            }
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @login_required
    def attendance_today():
        rows = container.attendance_service.today()
        return jsonify([report_row_to_dict(r) for r in rows])

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @login_required
    def attendance_history():
        rows = container.attendance_service.history(staff_id=request.args.get("staffId"))
        return jsonify([report_row_to_dict(r) for r in rows])
