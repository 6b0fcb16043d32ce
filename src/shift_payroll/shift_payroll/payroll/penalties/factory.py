from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import PenaltyType
from .base import PenaltyRule
from .fixed_rule import FixedPenaltyRule
from .minute_rule import PerBlockPenaltyRule
from .percent_rule import PercentPenaltyRule


@dataclass
class PenaltyRuleFactory:
    """Factory Pattern: choose the penalty rule for a policy's penalty type."""

    def for_type(self, penalty_type: PenaltyType) -> PenaltyRule:
        if penalty_type == PenaltyType.FIXED:
            return FixedPenaltyRule()
        if penalty_type == PenaltyType.PER_MINUTE:
            return PerBlockPenaltyRule(1)
        if penalty_type == PenaltyType.PER_5_MINUTES:
            return PerBlockPenaltyRule(5)
        if penalty_type == PenaltyType.PER_10_MINUTES:
            return PerBlockPenaltyRule(10)
        if penalty_type == PenaltyType.PERCENT:
            return PercentPenaltyRule()
        raise ValueError(f"Unsupported penalty type: {penalty_type!r}")
