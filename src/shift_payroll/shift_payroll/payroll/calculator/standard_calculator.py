from __future__ import annotations

from decimal import Decimal

from ...common.money import to_money
from ...core.enums import SalaryType
from ...staff.policy import PayrollPolicy
from .base import SalaryCalculator, daily_rate


class MonthlySalaryCalculator(SalaryCalculator):
    """Fixed monthly salary regardless of days worked."""

    def base_salary(self, *, policy: PayrollPolicy, period: str, worked_days: int) -> Decimal:
        return to_money(policy.salary)


class DailySalaryCalculator(SalaryCalculator):
    """Daily rate times worked days."""

    def base_salary(self, *, policy: PayrollPolicy, period: str, worked_days: int) -> Decimal:
        return to_money(daily_rate(policy, period) * worked_days)


class ShiftSalaryCalculator(SalaryCalculator):
    """Shift rate times worked shifts; the monthly salary stands in when no rate is set."""

    def base_salary(self, *, policy: PayrollPolicy, period: str, worked_days: int) -> Decimal:
        return to_money(daily_rate(policy, period) * worked_days)


_CALCULATORS: dict[SalaryType, SalaryCalculator] = {
    SalaryType.MONTH: MonthlySalaryCalculator(),
    SalaryType.DAY: DailySalaryCalculator(),
    SalaryType.SHIFT: ShiftSalaryCalculator(),
}


def calculator_for(salary_type: SalaryType) -> SalaryCalculator:
    return _CALCULATORS[salary_type]
