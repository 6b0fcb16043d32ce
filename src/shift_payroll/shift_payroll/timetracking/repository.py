from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import TimeTrackingRecord


class TimeTrackingRepository(Protocol):
    def create(self, record: TimeTrackingRecord) -> TimeTrackingRecord:
        """Insert ``record`` (its record_id is ignored) and return it with the new id."""

        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[TimeTrackingRecord]:
        raise NotImplementedError

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[TimeTrackingRecord]:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> Sequence[TimeTrackingRecord]:
        raise NotImplementedError

    def update(self, record: TimeTrackingRecord) -> bool:
        """Overwrite every mutable field of the stored record with ``record``'s values."""

        raise NotImplementedError
