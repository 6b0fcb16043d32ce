from __future__ import annotations

import math
from decimal import Decimal

from ...common.money import ZERO, to_money
from .base import PenaltyRule


class PerBlockPenaltyRule(PenaltyRule):
    """Rate charged per started block of ``block_minutes`` (1 = per minute)."""

    def __init__(self, block_minutes: int = 1):
        if block_minutes < 1:
            raise ValueError("block_minutes must be >= 1")
        self.block_minutes = block_minutes

    def amount(self, *, minutes: int, rate: Decimal, prorated_base: Decimal) -> Decimal:
        if minutes <= 0:
            return ZERO
        blocks = math.ceil(minutes / self.block_minutes)
        return to_money(rate * blocks)
