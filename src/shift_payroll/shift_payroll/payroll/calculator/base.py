from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...common.datetime_utils import working_days_in_period
from ...common.money import ZERO, to_money
from ...core.enums import SalaryType
from ...staff.policy import PayrollPolicy


def daily_rate(policy: PayrollPolicy, period: str) -> Decimal:
    """One unit of pay: the shift rate for shift workers, otherwise salary over the month's working days."""
    if policy.salary_type == SalaryType.SHIFT:
        return policy.shift_rate if policy.shift_rate > ZERO else policy.salary
    return to_money(policy.salary / working_days_in_period(period))


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for base salary)."""

    @abstractmethod
    def base_salary(self, *, policy: PayrollPolicy, period: str, worked_days: int) -> Decimal:
        raise NotImplementedError
