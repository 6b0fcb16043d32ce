from __future__ import annotations

from decimal import Decimal

import pytest

from src.shift_payroll.shift_payroll.core.enums import PenaltyType, SalaryType
from src.shift_payroll.shift_payroll.core.exceptions import PolicyResolutionError
from src.shift_payroll.shift_payroll.staff.policy import (
    PolicyDefaults,
    default_overtime_rate,
    resolve_policy,
    resolve_policy_or_default,
)
from tests.fakes import make_staff


def test_complete_record_resolves_strictly():
    policy = resolve_policy(make_staff(1, salary_type="SHIFT", shift_rate=Decimal("4800"), penalty_type="per_minute"))

    assert policy.salary_type == SalaryType.SHIFT
    assert policy.penalty_type == PenaltyType.PER_MINUTE
    assert policy.overtime_rate == Decimal("10.00")
    assert not policy.is_fallback


def test_missing_fields_raise_in_strict_mode():
    with pytest.raises(PolicyResolutionError) as exc:
        resolve_policy(make_staff(7, salary_type=None, penalty_type="bogus"))
    assert exc.value.staff_id == 7
    assert set(exc.value.missing) == {"salary_type", "penalty_type"}


def test_missing_salary_type_falls_back_to_zero_month():
    policy = resolve_policy_or_default(make_staff(3, salary_type=None, salary=Decimal("50000")))

    assert policy.salary_type == SalaryType.MONTH
    assert policy.salary == Decimal("0")
    assert policy.fallback_fields == ("salary_type",)


def test_missing_penalty_type_uses_institution_default():
    defaults = PolicyDefaults(penalty_type=PenaltyType.PER_5_MINUTES, absence_penalty=Decimal("700"))
    policy = resolve_policy_or_default(make_staff(3, penalty_type=None), defaults)

    assert policy.penalty_type == PenaltyType.PER_5_MINUTES
    assert policy.absence_penalty == Decimal("700.00")
    assert policy.salary == Decimal("30000.00")


def test_staff_values_override_defaults():
    defaults = PolicyDefaults(absence_penalty=Decimal("700"), punctuality_bonus=Decimal("100"))
    policy = resolve_policy(
        make_staff(1, absence_penalty=Decimal("0"), punctuality_bonus=Decimal("250"), overtime_rate=Decimal("3")),
        defaults,
    )

    assert policy.absence_penalty == Decimal("0.00")
    assert policy.punctuality_bonus == Decimal("250.00")
    assert policy.overtime_rate == Decimal("3.00")


def test_default_overtime_rate_zero_without_shift_rate():
    assert default_overtime_rate(Decimal("0")) == Decimal("0")
