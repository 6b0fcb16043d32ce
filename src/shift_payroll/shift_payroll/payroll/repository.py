from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Fine, Payroll


class PayrollRepository(Protocol):
    """Persisted payroll rows, unique per (staff_id, period)."""

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def get_for_staff_period(self, *, staff_id: int, period: str) -> Optional[Payroll]:
        raise NotImplementedError

    def list_period(self, *, period: str, staff_id: Optional[int] = None) -> Sequence[Payroll]:
        raise NotImplementedError

    def create(self, payroll: Payroll) -> Payroll:
        """Insert and return the row with its new id.

        Must raise ValidationError when a row already exists for (staff_id, period).
        """
        raise NotImplementedError

    def update(self, payroll: Payroll) -> bool:
        raise NotImplementedError


class FineRepository(Protocol):
    def list_period(self, *, period: str, staff_id: Optional[int] = None) -> Sequence[Fine]:
        raise NotImplementedError
