from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import period_of
from ..common.money import ZERO, non_negative, to_money
from ..staff.policy import PayrollPolicy
from .calculator.standard_calculator import calculator_for
from .model import Fine, Payroll, VirtualPayroll


def _sum(values: Iterable[Decimal]) -> Decimal:
    return to_money(sum(values, ZERO))


class PayrollAggregator:
    """Folds annotated attendance records and approved fines into one staff member's month.

    Reading never persists: without a stored row the result is a VirtualPayroll.
    """

    def compute(
        self,
        *,
        policy: PayrollPolicy,
        period: str,
        records: Iterable[AttendanceRecord],
        fines: Iterable[Fine] = (),
        staff_name: Optional[str] = None,
    ) -> VirtualPayroll:
        mine = [r for r in records if r.staff_id == policy.staff_id and period_of(r.work_date) == period]
        worked = sum(1 for r in mine if r.is_worked)

        base = calculator_for(policy.salary_type).base_salary(policy=policy, period=period, worked_days=worked)
        bonuses = _sum(r.money.bonuses for r in mine)
        late = _sum(r.money.late_amount for r in mine)
        early = _sum(r.money.early_leave_amount for r in mine)
        absence = _sum(r.money.unauthorized_absence_amount for r in mine)
        penalties = to_money(late + early + absence)
        deductions = _sum(
            f.amount
            for f in fines
            if f.approved and f.staff_id == policy.staff_id and period_of(f.fine_date) == period
        )

        return VirtualPayroll(
            staff_id=policy.staff_id,
            period=period,
            salary_type=policy.salary_type,
            shift_rate=policy.shift_rate,
            base_salary=base,
            bonuses=bonuses,
            deductions=deductions,
            penalties=penalties,
            late_penalties=late,
            early_leave_penalties=early,
            absence_penalties=absence,
            total=payroll_total(base, bonuses, deductions, penalties),
            worked_days=worked,
            staff_name=staff_name,
        )

    def aggregate(
        self,
        *,
        policy: PayrollPolicy,
        period: str,
        records: Iterable[AttendanceRecord],
        fines: Iterable[Fine] = (),
        persisted: Optional[Payroll] = None,
        staff_name: Optional[str] = None,
    ) -> Payroll:
        """The stored row when there is one, otherwise a fresh VirtualPayroll."""
        if persisted is not None:
            return persisted
        return self.compute(policy=policy, period=period, records=records, fines=fines, staff_name=staff_name)


def payroll_total(base: Decimal, bonuses: Decimal, deductions: Decimal, penalties: Decimal) -> Decimal:
    return non_negative(to_money(base + bonuses - deductions - penalties))
