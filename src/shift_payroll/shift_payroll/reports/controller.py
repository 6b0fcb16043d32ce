from __future__ import annotations

import csv
import io
from datetime import date

from flask import Flask, request

from ..common.datetime_utils import period_of
from ..common.http import date_arg, error_response, optional_int_arg
from ..container import Container

_ATTENDANCE_FIELDS = [
    "work_date",
    "staff_id",
    "full_name",
    "shift",
    "check_in",
    "check_out",
    "status",
    "worked_hours",
    "late_minutes",
    "early_leave_minutes",
    "overtime_minutes",
    "penalties",
    "bonuses",
    "note",
]

_PAYROLL_FIELDS = [
    "period",
    "staff_id",
    "staff_name",
    "salary_type",
    "worked_days",
    "base_salary",
    "bonuses",
    "deductions",
    "late_penalties",
    "early_leave_penalties",
    "absence_penalties",
    "penalties",
    "total",
    "status",
    "virtual",
]


def register(app: Flask, container: Container) -> None:
    def _write_csv(*, rows: list[dict], fieldnames: list[str], filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/attendance.csv", methods=["GET"], endpoint="api_report_attendance_csv")
    def api_report_attendance_csv():
        try:
            start = date_arg(request.args.get("start"), "start")
            end = date_arg(request.args.get("end"), "end")
            staff_id = optional_int_arg(request.args.get("staff_id"), "staff_id")
            data = container.report_service.build_attendance_report(start=start, end=end, staff_id=staff_id)
        except Exception as e:
            return error_response(e)

        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_csv(rows=data.rows, fieldnames=_ATTENDANCE_FIELDS, filename=filename)

    @app.route("/api/reports/payroll.csv", methods=["GET"], endpoint="api_report_payroll_csv")
    def api_report_payroll_csv():
        try:
            period = request.args.get("period") or period_of(date.today())
            data = container.report_service.build_payroll_report(period=period)
        except Exception as e:
            return error_response(e)

        return _write_csv(rows=data.rows, fieldnames=_PAYROLL_FIELDS, filename=f"payroll_{period}.csv")
