from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import period_of
from ..common.http import error_response, json_body, optional_int_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll", methods=["GET"], endpoint="api_payroll_list")
    def api_payroll_list():
        try:
            period = request.args.get("period") or period_of(date.today())
            staff_id = optional_int_arg(request.args.get("staff_id"), "staff_id")
            payrolls = service.list_period(period, staff_id=staff_id)
            return jsonify({"success": True, "period": period, "payrolls": [p.as_dict() for p in payrolls]}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/payroll/save", methods=["POST"], endpoint="api_payroll_save")
    def api_payroll_save():
        try:
            data = json_body()
            payroll = service.save(data.get("staff_id"), data.get("period") or period_of(date.today()))
            return jsonify({"success": True, "payroll": payroll.as_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/payroll/<int:payroll_id>/recalculate", methods=["POST"], endpoint="api_payroll_recalculate")
    def api_payroll_recalculate(payroll_id: int):
        try:
            return jsonify({"success": True, "payroll": service.recalculate(payroll_id).as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/payroll/<int:payroll_id>/approve", methods=["POST"], endpoint="api_payroll_approve")
    def api_payroll_approve(payroll_id: int):
        try:
            return jsonify({"success": True, "payroll": service.approve(payroll_id).as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/payroll/<int:payroll_id>/mark-paid", methods=["POST"], endpoint="api_payroll_mark_paid")
    def api_payroll_mark_paid(payroll_id: int):
        try:
            return jsonify({"success": True, "payroll": service.mark_paid(payroll_id).as_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/payroll/<int:payroll_id>", methods=["PATCH"], endpoint="api_payroll_update")
    def api_payroll_update(payroll_id: int):
        try:
            data = json_body()
            payroll = service.update(
                payroll_id,
                bonuses=data.get("bonuses"),
                deductions=data.get("deductions"),
                notes=data.get("notes"),
            )
            return jsonify({"success": True, "payroll": payroll.as_dict()}), 200
        except Exception as e:
            return error_response(e)
