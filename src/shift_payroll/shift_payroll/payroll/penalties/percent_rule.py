from __future__ import annotations

from decimal import Decimal

from ...common.money import ZERO, to_money
from .base import PenaltyRule


class PercentPenaltyRule(PenaltyRule):
    """``rate`` percent of the prorated base (one day's or one shift's pay)."""

    def amount(self, *, minutes: int, rate: Decimal, prorated_base: Decimal) -> Decimal:
        if minutes <= 0:
            return ZERO
        return to_money(prorated_base * rate / Decimal(100))
