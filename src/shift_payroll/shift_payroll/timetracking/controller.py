from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import date_arg, error_response, json_body, time_arg
from ..container import Container
from ..geofence.validator import Coordinate


def register(app: Flask, container: Container) -> None:
    service = container.time_tracking_service

    def _clock_response(result, message: str):
        body = {
            "success": True,
            "message": message,
            "record": result.record.as_dict(),
            "shift": result.shift.as_dict() if result.shift else None,
            "geofence": result.geofence.as_dict(),
        }
        return jsonify(body), 200

    @app.route("/api/time-tracking/clock-in", methods=["POST"], endpoint="api_clock_in")
    def api_clock_in():
        try:
            data = json_body()
            result = service.clock_in(data.get("staff_id"), coordinate=Coordinate.parse(data.get("location") or data))
            return _clock_response(result, "Checked in")
        except Exception as e:
            return error_response(e)

    @app.route("/api/time-tracking/clock-out", methods=["POST"], endpoint="api_clock_out")
    def api_clock_out():
        try:
            data = json_body()
            result = service.clock_out(data.get("staff_id"), coordinate=Coordinate.parse(data.get("location") or data))
            return _clock_response(result, "Checked out")
        except Exception as e:
            return error_response(e)

    @app.route("/api/time-tracking/manual", methods=["POST"], endpoint="api_time_tracking_manual")
    def api_time_tracking_manual():
        try:
            data = json_body()
            record = service.manual_entry(
                data.get("staff_id"),
                work_date=date_arg(data.get("date"), "date"),
                actual_start=time_arg(data.get("actual_start")),
                actual_end=time_arg(data.get("actual_end")),
                notes=data.get("notes"),
            )
            return jsonify({"success": True, "record": record.as_dict()}), 200
        except Exception as e:
            return error_response(e)
