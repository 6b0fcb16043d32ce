from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftStatus
from .model import NewShift, Shift


class ShiftRepository(Protocol):
    def create(self, new: NewShift) -> Shift:
        """Persist a scheduled shift.

        Must raise DuplicateShiftError when a non-cancelled shift already exists for
        (staff_id, work_date); the store's uniqueness constraint is the real guard.
        """

        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def find_active(self, *, staff_id: int, work_date: date) -> Optional[Shift]:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        status: Optional[ShiftStatus] = None,
    ) -> Sequence[Shift]:
        raise NotImplementedError

    def list_scheduled_before(self, day: date) -> Sequence[Shift]:
        raise NotImplementedError

    def update_status(self, *, shift_id: int, status: ShiftStatus) -> bool:
        raise NotImplementedError

    def update_details(
        self,
        *,
        shift_id: int,
        start_time: time,
        end_time: time,
        break_minutes: int,
        alternative_staff_id: Optional[int],
        notes: Optional[str],
    ) -> bool:
        raise NotImplementedError
