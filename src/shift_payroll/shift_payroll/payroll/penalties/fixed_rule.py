from __future__ import annotations

from decimal import Decimal

from ...common.money import ZERO, to_money
from .base import PenaltyRule


class FixedPenaltyRule(PenaltyRule):
    """Flat amount, once, whenever there is at least one minute."""

    def amount(self, *, minutes: int, rate: Decimal, prorated_base: Decimal) -> Decimal:
        return to_money(rate) if minutes > 0 else ZERO
