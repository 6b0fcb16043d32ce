"""Single place where a staff record's payroll attributes become a complete policy.

Every computation site receives a fully-populated ``PayrollPolicy``; nothing downstream
falls back on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO, to_money
from ..core.constants import STANDARD_SHIFT_MINUTES
from ..core.enums import PenaltyType, SalaryType
from ..core.exceptions import PolicyResolutionError
from .model import StaffMember

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyDefaults:
    """Institution-wide values used when the staff record leaves them blank."""

    penalty_type: PenaltyType = PenaltyType.FIXED
    absence_penalty: Decimal = ZERO
    punctuality_bonus: Decimal = ZERO


@dataclass(frozen=True)
class PayrollPolicy:
    staff_id: int
    salary_type: SalaryType
    salary: Decimal
    shift_rate: Decimal
    penalty_type: PenaltyType
    penalty_amount: Decimal
    absence_penalty: Decimal
    punctuality_bonus: Decimal
    overtime_rate: Decimal
    fallback_fields: tuple[str, ...] = field(default=())

    @property
    def is_fallback(self) -> bool:
        return bool(self.fallback_fields)


def _parse_enum(enum_cls, raw: Optional[str]):
    if raw is None:
        return None
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        return None


def default_overtime_rate(shift_rate: Decimal) -> Decimal:
    """Per-minute overtime pay derived from the shift rate."""
    return to_money(shift_rate / STANDARD_SHIFT_MINUTES) if shift_rate > ZERO else ZERO


def _build(staff: StaffMember, salary_type: SalaryType, salary: Decimal, penalty_type: PenaltyType,
           defaults: PolicyDefaults, fallback_fields: tuple[str, ...]) -> PayrollPolicy:
    shift_rate = to_money(staff.shift_rate)
    overtime_rate = (
        to_money(staff.overtime_rate) if staff.overtime_rate is not None else default_overtime_rate(shift_rate)
    )
    return PayrollPolicy(
        staff_id=staff.staff_id,
        salary_type=salary_type,
        salary=salary,
        shift_rate=shift_rate,
        penalty_type=penalty_type,
        penalty_amount=to_money(staff.penalty_amount),
        absence_penalty=to_money(staff.absence_penalty if staff.absence_penalty is not None else defaults.absence_penalty),
        punctuality_bonus=to_money(
            staff.punctuality_bonus if staff.punctuality_bonus is not None else defaults.punctuality_bonus
        ),
        overtime_rate=overtime_rate,
        fallback_fields=fallback_fields,
    )


def resolve_policy(staff: StaffMember, defaults: PolicyDefaults = PolicyDefaults()) -> PayrollPolicy:
    """Strict resolution: raises PolicyResolutionError when salary_type or penalty_type is unusable."""

    salary_type = _parse_enum(SalaryType, staff.salary_type)
    penalty_type = _parse_enum(PenaltyType, staff.penalty_type)

    missing = []
    if salary_type is None:
        missing.append("salary_type")
    if penalty_type is None:
        missing.append("penalty_type")
    if missing:
        raise PolicyResolutionError(staff.staff_id, missing)

    return _build(staff, salary_type, to_money(staff.salary), penalty_type, defaults, ())


def fallback_policy(staff: StaffMember, defaults: PolicyDefaults = PolicyDefaults()) -> PayrollPolicy:
    """Documented defaults for an incomplete record.

    A missing/unknown salary_type becomes ``month`` with a zero base salary; a missing/unknown
    penalty_type becomes ``defaults.penalty_type``.
    """

    salary_type = _parse_enum(SalaryType, staff.salary_type)
    penalty_type = _parse_enum(PenaltyType, staff.penalty_type)

    fallback_fields: list[str] = []
    salary = to_money(staff.salary)
    if salary_type is None:
        salary_type = SalaryType.MONTH
        salary = ZERO
        fallback_fields.append("salary_type")
    if penalty_type is None:
        penalty_type = defaults.penalty_type
        fallback_fields.append("penalty_type")

    return _build(staff, salary_type, to_money(salary), penalty_type, defaults, tuple(fallback_fields))


def resolve_policy_or_default(staff: StaffMember, defaults: PolicyDefaults = PolicyDefaults()) -> PayrollPolicy:
    """Resolve, recovering from PolicyResolutionError so a payroll view always renders."""
    try:
        return resolve_policy(staff, defaults)
    except PolicyResolutionError as e:
        logger.warning(
            "payroll policy incomplete, using defaults",
            extra={"staff_id": e.staff_id, "missing": list(e.missing)},
        )
        return fallback_policy(staff, defaults)
