from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.http import date_arg, error_response, optional_int_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance")
    def api_attendance():
        try:
            today = date.today()
            start = date_arg(request.args.get("start"), "start", today.replace(day=1))
            end = date_arg(request.args.get("end"), "end", today)
            staff_id = optional_int_arg(request.args.get("staff_id"), "staff_id")

            records = container.attendance_service.list_range(start=start, end=end, staff_id=staff_id)
            return jsonify({"success": True, "records": [r.as_dict() for r in records]}), 200
        except Exception as e:
            return error_response(e)
