from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class StaffMember:
    """Domain entity: a staff directory entry with its raw payroll attributes.

    Policy fields are stored as the directory returns them (possibly missing or unknown);
    ``staff.policy.resolve_policy`` turns them into a complete PayrollPolicy.
    """

    staff_id: int
    full_name: str
    role: Optional[str] = None
    salary_type: Optional[str] = None
    salary: Optional[Decimal] = None
    shift_rate: Optional[Decimal] = None
    penalty_type: Optional[str] = None
    penalty_amount: Optional[Decimal] = None
    absence_penalty: Optional[Decimal] = None
    punctuality_bonus: Optional[Decimal] = None
    overtime_rate: Optional[Decimal] = None
    is_active: bool = True
