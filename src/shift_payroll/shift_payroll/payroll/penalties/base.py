from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class PenaltyRule(ABC):
    """Strategy Pattern: how a number of late/early minutes turns into money."""

    @abstractmethod
    def amount(self, *, minutes: int, rate: Decimal, prorated_base: Decimal) -> Decimal:
        raise NotImplementedError
