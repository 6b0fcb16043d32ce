from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import PayrollStatus, SalaryType


@dataclass(frozen=True)
class Payroll:
    """Per-staff, per-month payroll. Persisted rows carry ``payroll_id``."""

    staff_id: int
    period: str
    salary_type: SalaryType = SalaryType.MONTH
    shift_rate: Decimal = ZERO
    base_salary: Decimal = ZERO
    bonuses: Decimal = ZERO
    deductions: Decimal = ZERO
    penalties: Decimal = ZERO
    late_penalties: Decimal = ZERO
    early_leave_penalties: Decimal = ZERO
    absence_penalties: Decimal = ZERO
    total: Decimal = ZERO
    worked_days: int = 0
    status: PayrollStatus = PayrollStatus.DRAFT
    staff_name: Optional[str] = None
    notes: Optional[str] = None
    payroll_id: Optional[int] = None

    @property
    def is_virtual(self) -> bool:
        return self.payroll_id is None

    def as_dict(self) -> dict:
        return {
            "id": self.payroll_id,
            "virtual": self.is_virtual,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "period": self.period,
            "salary_type": self.salary_type.value,
            "shift_rate": str(self.shift_rate),
            "base_salary": str(self.base_salary),
            "bonuses": str(self.bonuses),
            "deductions": str(self.deductions),
            "penalties": str(self.penalties),
            "late_penalties": str(self.late_penalties),
            "early_leave_penalties": str(self.early_leave_penalties),
            "absence_penalties": str(self.absence_penalties),
            "total": str(self.total),
            "worked_days": self.worked_days,
            "status": self.status.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class VirtualPayroll(Payroll):
    """Computed but not committed: no identity, always draft."""

    def __post_init__(self):
        if self.payroll_id is not None or self.status != PayrollStatus.DRAFT:
            raise ValueError("VirtualPayroll has no identity and is always draft")


@dataclass(frozen=True)
class Fine:
    fine_id: int
    staff_id: int
    fine_date: date
    amount: Decimal
    reason: Optional[str] = None
    approved: bool = False


def as_payroll(payroll: Payroll, **changes) -> Payroll:
    """Copy into a plain Payroll (dropping the virtual marker) with ``changes`` applied."""
    values = {f.name: getattr(payroll, f.name) for f in fields(Payroll)}
    values.update(changes)
    return Payroll(**values)
