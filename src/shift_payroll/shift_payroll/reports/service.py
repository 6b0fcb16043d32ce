from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.service import AttendanceService
from ..common.money import ZERO
from ..payroll.service import PayrollService


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class ReportService:
    """Flattens computed attendance and payroll into plain rows for the export side."""

    def __init__(self, attendance: AttendanceService, payroll: PayrollService):
        self._attendance = attendance
        self._payroll = payroll

    def build_attendance_report(self, *, start: date, end: date, staff_id: Optional[int] = None) -> ReportData:
        records = self._attendance.list_range(start=start, end=end, staff_id=staff_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in records:
            minutes = r.deltas.work_duration
            out_rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "staff_id": r.staff_id,
                    "full_name": r.staff_name or "-",
                    "shift": f"{r.scheduled_start:%H:%M}-{r.scheduled_end:%H:%M}" if r.scheduled_start and r.scheduled_end else "-",
                    "check_in": r.actual_start.strftime("%H:%M") if r.actual_start else "-",
                    "check_out": r.actual_end.strftime("%H:%M") if r.actual_end else "-",
                    "status": r.status.value,
                    "worked_hours": _hhmm(minutes),
                    "late_minutes": r.deltas.late_minutes,
                    "early_leave_minutes": r.deltas.early_leave_minutes,
                    "overtime_minutes": r.deltas.overtime_minutes,
                    "penalties": str(r.money.penalties),
                    "bonuses": str(r.money.bonuses),
                    "note": r.notes or "",
                }
            )

            s = summary_map.get(r.staff_id)
            if not s:
                s = {
                    "staff_id": r.staff_id,
                    "full_name": r.staff_name or "-",
                    "total_minutes": 0,
                    "worked_days": 0,
                    "late_minutes": 0,
                    "penalties": ZERO,
                    "bonuses": ZERO,
                }
                summary_map[r.staff_id] = s
            s["total_minutes"] += minutes
            s["worked_days"] += 1 if r.is_worked else 0
            s["late_minutes"] += r.deltas.late_minutes
            s["penalties"] += r.money.penalties
            s["bonuses"] += r.money.bonuses

        summary = []
        for s in summary_map.values():
            summary.append(
                {
                    "staff_id": s["staff_id"],
                    "full_name": s["full_name"],
                    "total_minutes": s["total_minutes"],
                    "total_hours": _hhmm(int(s["total_minutes"])),
                    "worked_days": s["worked_days"],
                    "late_minutes": s["late_minutes"],
                    "penalties": str(s["penalties"]),
                    "bonuses": str(s["bonuses"]),
                }
            )

        summary.sort(key=lambda x: x["total_minutes"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)

    def build_payroll_report(self, *, period: str) -> ReportData:
        payrolls = self._payroll.list_period(period)
        rows = [p.as_dict() for p in payrolls]

        totals = {"base_salary": ZERO, "bonuses": ZERO, "deductions": ZERO, "penalties": ZERO, "total": ZERO}
        for p in payrolls:
            totals["base_salary"] += p.base_salary
            totals["bonuses"] += p.bonuses
            totals["deductions"] += p.deductions
            totals["penalties"] += p.penalties
            totals["total"] += p.total

        summary = [
            {
                "period": period,
                "staff_count": len(payrolls),
                "virtual_count": sum(1 for p in payrolls if p.is_virtual),
                **{k: str(v) for k, v in totals.items()},
            }
        ]
        return ReportData(rows=rows, summary=summary)
