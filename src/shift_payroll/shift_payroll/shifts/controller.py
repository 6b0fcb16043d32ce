from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import DateRange
from ..common.http import date_arg, error_response, json_body, optional_int_arg, time_arg
from ..core.enums import ShiftStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ShiftTemplate
from .scheduler import KEEP


def _staff_ids(data: dict) -> list[int]:
    raw = data.get("staff_ids")
    if not isinstance(raw, list) or not raw:
        raise ValidationError("staff_ids must be a non-empty list")
    try:
        return [int(x) for x in raw]
    except (TypeError, ValueError):
        raise ValidationError("staff_ids must contain integers")


def register(app: Flask, container: Container) -> None:
    scheduler = container.scheduler

    @app.route("/api/shifts", methods=["GET"], endpoint="api_shifts_list")
    def api_shifts_list():
        try:
            today = date.today()
            start = date_arg(request.args.get("start"), "start", today)
            end = date_arg(request.args.get("end"), "end", start + timedelta(days=6))
            staff_id = optional_int_arg(request.args.get("staff_id"), "staff_id")
            status = request.args.get("status")

            shifts = scheduler.list_range(start=start, end=end, staff_id=staff_id)
            if status:
                shifts = [s for s in shifts if s.status.value == status]
            return jsonify({"success": True, "shifts": [s.as_dict() for s in shifts]}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/shifts", methods=["POST"], endpoint="api_shifts_create")
    def api_shifts_create():
        try:
            data = json_body()
            shift = scheduler.create_shift(
                staff_id=data.get("staff_id"),
                work_date=date_arg(data.get("date"), "date"),
                start_time=time_arg(data.get("start_time")),
                end_time=time_arg(data.get("end_time")),
                break_minutes=optional_int_arg(data.get("break_minutes"), "break_minutes"),
                alternative_staff_id=data.get("alternative_staff_id"),
                notes=data.get("notes"),
            )
            return jsonify({"success": True, "shift": shift.as_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/shifts/<int:shift_id>", methods=["PATCH"], endpoint="api_shifts_update")
    def api_shifts_update(shift_id: int):
        try:
            data = json_body()
            shift = scheduler.update_shift(
                shift_id,
                start_time=time_arg(data.get("start_time")),
                end_time=time_arg(data.get("end_time")),
                break_minutes=optional_int_arg(data.get("break_minutes"), "break_minutes"),
                alternative_staff_id=data["alternative_staff_id"] if "alternative_staff_id" in data else KEEP,
                notes=data.get("notes"),
            )
            return jsonify({"success": True, "shift": shift.as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/shifts/<int:shift_id>/cancel", methods=["POST"], endpoint="api_shifts_cancel")
    def api_shifts_cancel(shift_id: int):
        try:
            shift = scheduler.cancel(shift_id)
            return jsonify({"success": True, "shift": shift.as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/shifts/bulk", methods=["POST"], endpoint="api_shifts_bulk")
    def api_shifts_bulk():
        try:
            data = json_body()
            staff_ids = _staff_ids(data)
            start = date_arg(data.get("start"), "start", date.today())
            end = date_arg(data.get("end"), "end")
            if start > end:
                raise ValidationError("start must not be after end")

            template = None
            if data.get("start_time") or data.get("end_time"):
                base = scheduler.template
                breaks = optional_int_arg(data.get("break_minutes"), "break_minutes")
                template = ShiftTemplate(
                    start_time=time_arg(data.get("start_time")) or base.start_time,
                    end_time=time_arg(data.get("end_time")) or base.end_time,
                    break_minutes=base.break_minutes if breaks is None else breaks,
                    notes=base.notes,
                )
            result = scheduler.bulk_generate(staff_ids, DateRange(start, end), template)
            return jsonify({"success": True, **result.as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/shifts/copy-week", methods=["POST"], endpoint="api_shifts_copy_week")
    def api_shifts_copy_week():
        try:
            data = json_body()
            staff_ids = _staff_ids(data) if data.get("staff_ids") is not None else None
            result = scheduler.copy_week(
                date_arg(data.get("from_week"), "from_week"),
                date_arg(data.get("to_week"), "to_week"),
                staff_ids,
            )
            return jsonify({"success": True, **result.as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/shifts/no-shows", methods=["POST"], endpoint="api_shifts_no_shows")
    def api_shifts_no_shows():
        try:
            data = json_body()
            as_of = date_arg(data.get("as_of"), "as_of", date.today())
            count = scheduler.mark_no_shows(as_of)
            return jsonify({"success": True, "marked": count, "status": ShiftStatus.NO_SHOW.value}), 200
        except Exception as e:
            return error_response(e)
