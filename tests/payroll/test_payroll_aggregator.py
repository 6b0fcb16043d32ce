from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.shift_payroll.shift_payroll.attendance.model import AttendanceRecord, ReconcileKind
from src.shift_payroll.shift_payroll.core.enums import AttendanceStatus, PayrollStatus, PenaltyType, SalaryType
from src.shift_payroll.shift_payroll.payroll.aggregator import PayrollAggregator, payroll_total
from src.shift_payroll.shift_payroll.payroll.engine import MoneyBreakdown
from src.shift_payroll.shift_payroll.payroll.model import Fine, Payroll, VirtualPayroll
from src.shift_payroll.shift_payroll.staff.policy import PayrollPolicy


def _policy(salary_type=SalaryType.MONTH, salary="0", shift_rate="0", staff_id=1) -> PayrollPolicy:
    return PayrollPolicy(
        staff_id=staff_id,
        salary_type=salary_type,
        salary=Decimal(salary),
        shift_rate=Decimal(shift_rate),
        penalty_type=PenaltyType.FIXED,
        penalty_amount=Decimal("0"),
        absence_penalty=Decimal("0"),
        punctuality_bonus=Decimal("0"),
        overtime_rate=Decimal("0"),
    )


def _record(day: date, status=AttendanceStatus.CHECKED_OUT, staff_id=1, money=None) -> AttendanceRecord:
    return AttendanceRecord(
        kind=ReconcileKind.MERGED,
        staff_id=staff_id,
        work_date=day,
        status=status,
        shift_id=day.day,
        money=money or MoneyBreakdown(),
    )


def test_shift_salary_counts_worked_shifts():
    records = [_record(date(2024, 5, 6)), _record(date(2024, 5, 7))]
    payroll = PayrollAggregator().compute(
        policy=_policy(SalaryType.SHIFT, shift_rate="5000"), period="2024-05", records=records
    )

    assert payroll.worked_days == 2
    assert payroll.base_salary == Decimal("10000.00")


def test_no_persisted_row_gives_virtual_draft():
    records = [_record(date(2024, 6, 3))]
    payroll = PayrollAggregator().aggregate(
        policy=_policy(SalaryType.MONTH, salary="40000", staff_id=1), period="2024-06", records=records, persisted=None
    )

    assert isinstance(payroll, VirtualPayroll)
    assert payroll.payroll_id is None
    assert payroll.is_virtual
    assert payroll.status == PayrollStatus.DRAFT
    assert payroll.base_salary == Decimal("40000.00")
    assert payroll.worked_days == 1


def test_persisted_row_returned_as_stored():
    stored = Payroll(staff_id=1, period="2024-06", total=Decimal("123.00"), status=PayrollStatus.APPROVED, payroll_id=9)
    payroll = PayrollAggregator().aggregate(policy=_policy(), period="2024-06", records=[], persisted=stored)
    assert payroll is stored


def test_virtual_payroll_cannot_have_identity():
    with pytest.raises(ValueError):
        VirtualPayroll(staff_id=1, period="2024-06", payroll_id=3)


def test_day_salary_uses_working_days_of_month():
    # May 2024 has 23 Monday-Friday days.
    records = [_record(date(2024, 5, d)) for d in (6, 7, 8)]
    payroll = PayrollAggregator().compute(policy=_policy(SalaryType.DAY, salary="23000"), period="2024-05", records=records)

    assert payroll.base_salary == Decimal("3000.00")


def test_only_worked_statuses_count():
    records = [
        _record(date(2024, 5, 6), AttendanceStatus.CHECKED_OUT),
        _record(date(2024, 5, 7), AttendanceStatus.COMPLETED),
        _record(date(2024, 5, 8), AttendanceStatus.CHECKED_IN),
        _record(date(2024, 5, 9), AttendanceStatus.ABSENT),
        _record(date(2024, 5, 10), AttendanceStatus.SCHEDULED),
    ]
    payroll = PayrollAggregator().compute(policy=_policy(SalaryType.SHIFT, shift_rate="100"), period="2024-05", records=records)
    assert payroll.worked_days == 2


def test_other_staff_and_periods_are_ignored():
    records = [
        _record(date(2024, 5, 6)),
        _record(date(2024, 5, 7), staff_id=2),
        _record(date(2024, 4, 30)),
    ]
    payroll = PayrollAggregator().compute(policy=_policy(SalaryType.SHIFT, shift_rate="100"), period="2024-05", records=records)
    assert payroll.worked_days == 1


def test_sums_bonuses_penalties_and_approved_fines():
    money = MoneyBreakdown(
        late_amount=Decimal("100"),
        early_leave_amount=Decimal("50"),
        unauthorized_absence_amount=Decimal("0"),
        overtime_bonus=Decimal("30"),
        punctuality_bonus=Decimal("20"),
    )
    absent = MoneyBreakdown(unauthorized_absence_amount=Decimal("500"))
    records = [_record(date(2024, 5, 6), money=money), _record(date(2024, 5, 7), AttendanceStatus.ABSENT, money=absent)]
    fines = [
        Fine(fine_id=1, staff_id=1, fine_date=date(2024, 5, 10), amount=Decimal("200"), approved=True),
        Fine(fine_id=2, staff_id=1, fine_date=date(2024, 5, 11), amount=Decimal("999"), approved=False),
        Fine(fine_id=3, staff_id=2, fine_date=date(2024, 5, 11), amount=Decimal("999"), approved=True),
        Fine(fine_id=4, staff_id=1, fine_date=date(2024, 6, 1), amount=Decimal("999"), approved=True),
    ]

    payroll = PayrollAggregator().compute(
        policy=_policy(SalaryType.MONTH, salary="10000"), period="2024-05", records=records, fines=fines
    )

    assert payroll.bonuses == Decimal("50.00")
    assert payroll.late_penalties == Decimal("100.00")
    assert payroll.early_leave_penalties == Decimal("50.00")
    assert payroll.absence_penalties == Decimal("500.00")
    assert payroll.penalties == Decimal("650.00")
    assert payroll.deductions == Decimal("200.00")
    assert payroll.total == Decimal("9200.00")


def test_total_never_negative():
    money = MoneyBreakdown(late_amount=Decimal("5000"))
    payroll = PayrollAggregator().compute(
        policy=_policy(SalaryType.MONTH, salary="1000"),
        period="2024-05",
        records=[_record(date(2024, 5, 6), money=money)],
        fines=[Fine(fine_id=1, staff_id=1, fine_date=date(2024, 5, 6), amount=Decimal("700"), approved=True)],
    )
    assert payroll.total == Decimal("0.00")


@pytest.mark.parametrize(
    "base, bonuses, deductions, penalties",
    [("0", "0", "0", "0"), ("100", "0", "200", "0"), ("100", "50", "0", "151"), ("1", "1", "1", "1")],
)
def test_payroll_total_floor(base, bonuses, deductions, penalties):
    total = payroll_total(Decimal(base), Decimal(bonuses), Decimal(deductions), Decimal(penalties))
    assert total >= 0
    assert total == max(Decimal("0"), Decimal(base) + Decimal(bonuses) - Decimal(deductions) - Decimal(penalties))
