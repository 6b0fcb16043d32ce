from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TrackingStatus
from ..payroll.deltas import TimeDeltas


@dataclass(frozen=True)
class TimeTrackingRecord:
    """Domain entity: the actual check-in/check-out of a staff member on one day.

    Delta fields are nullable: they may be precomputed at check-out or left for the
    reconciliation read to derive.
    """

    record_id: int
    staff_id: int
    work_date: date
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    status: Optional[TrackingStatus] = None
    late_minutes: Optional[int] = None
    early_leave_minutes: Optional[int] = None
    overtime_minutes: Optional[int] = None
    work_duration: Optional[int] = None
    notes: Optional[str] = None
    shift_id: Optional[int] = None
    in_zone: Optional[bool] = None
    is_manual_entry: bool = False

    @property
    def stored_deltas(self) -> TimeDeltas:
        return TimeDeltas(
            late_minutes=self.late_minutes or 0,
            early_leave_minutes=self.early_leave_minutes or 0,
            overtime_minutes=self.overtime_minutes or 0,
            work_duration=self.work_duration or 0,
        )

    def as_dict(self) -> dict:
        return {
            "id": self.record_id,
            "staff_id": self.staff_id,
            "date": self.work_date.isoformat(),
            "actual_start": self.actual_start.isoformat() if self.actual_start else None,
            "actual_end": self.actual_end.isoformat() if self.actual_end else None,
            "status": self.status.value if self.status else None,
            "late_minutes": self.late_minutes,
            "early_leave_minutes": self.early_leave_minutes,
            "overtime_minutes": self.overtime_minutes,
            "work_duration": self.work_duration,
            "notes": self.notes,
            "shift_id": self.shift_id,
            "in_zone": self.in_zone,
            "is_manual_entry": self.is_manual_entry,
        }
