from __future__ import annotations

from datetime import date
from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed from the current status."""


class DuplicateShiftError(DomainError):
    """Raised when a non-cancelled shift already exists for (staff_id, work_date)."""

    def __init__(self, staff_id: int, work_date: date):
        super().__init__(f"Staff {staff_id} already has a shift on {work_date.isoformat()}")
        self.staff_id = staff_id
        self.work_date = work_date


class PolicyResolutionError(DomainError):
    """Raised when a staff record lacks the fields needed to resolve its payroll policy."""

    def __init__(self, staff_id: int, missing: Sequence[str]):
        super().__init__(f"Staff {staff_id} has incomplete payroll policy: {', '.join(missing)}")
        self.staff_id = staff_id
        self.missing = tuple(missing)


class NotFoundError(DomainError):
    """Raised when a referenced staff member, shift or payroll does not exist."""


class StoreError(DomainError):
    """Raised when the backing store fails (connection loss, timeout, ...)."""
