from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO, non_negative, to_money
from ..core.enums import AttendanceStatus
from ..staff.policy import PayrollPolicy
from .deltas import TimeDeltas
from .penalties.factory import PenaltyRuleFactory

_ABSENCE_STATUSES = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.NO_SHOW})


@dataclass(frozen=True)
class MoneyBreakdown:
    late_amount: Decimal = ZERO
    early_leave_amount: Decimal = ZERO
    unauthorized_absence_amount: Decimal = ZERO
    overtime_bonus: Decimal = ZERO
    punctuality_bonus: Decimal = ZERO

    @property
    def penalties(self) -> Decimal:
        return self.late_amount + self.early_leave_amount + self.unauthorized_absence_amount

    @property
    def bonuses(self) -> Decimal:
        return self.overtime_bonus + self.punctuality_bonus

    def as_dict(self) -> dict:
        return {
            "late_amount": str(self.late_amount),
            "early_leave_amount": str(self.early_leave_amount),
            "unauthorized_absence_amount": str(self.unauthorized_absence_amount),
            "overtime_bonus": str(self.overtime_bonus),
            "punctuality_bonus": str(self.punctuality_bonus),
        }


class PenaltyBonusEngine:
    """Turns one day's time deltas and status into penalty and bonus amounts.

    Pure: no store access. ``prorated_base`` is the pay for one day (or one shift)
    and only matters for percent penalties.
    """

    def __init__(self, rule_factory: Optional[PenaltyRuleFactory] = None):
        self._rules = rule_factory or PenaltyRuleFactory()

    def evaluate(
        self,
        *,
        policy: PayrollPolicy,
        deltas: TimeDeltas,
        status: Optional[AttendanceStatus],
        prorated_base: Decimal = ZERO,
    ) -> MoneyBreakdown:
        rule = self._rules.for_type(policy.penalty_type)
        late_minutes = max(0, deltas.late_minutes)
        early_minutes = max(0, deltas.early_leave_minutes)

        late = rule.amount(minutes=late_minutes, rate=policy.penalty_amount, prorated_base=prorated_base)
        early = rule.amount(minutes=early_minutes, rate=policy.penalty_amount, prorated_base=prorated_base)

        absence = policy.absence_penalty if status in _ABSENCE_STATUSES else ZERO
        overtime = to_money(max(0, deltas.overtime_minutes) * policy.overtime_rate)

        punctual = late_minutes == 0 and early_minutes == 0 and status == AttendanceStatus.CHECKED_OUT
        punctuality = policy.punctuality_bonus if punctual else ZERO

        return MoneyBreakdown(
            late_amount=non_negative(to_money(late)),
            early_leave_amount=non_negative(to_money(early)),
            unauthorized_absence_amount=non_negative(to_money(absence)),
            overtime_bonus=non_negative(overtime),
            punctuality_bonus=non_negative(to_money(punctuality)),
        )
