from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from ..core.enums import AttendanceStatus
from ..payroll.deltas import TimeDeltas
from ..payroll.engine import MoneyBreakdown


class ReconcileKind(str, Enum):
    """Which source(s) produced an attendance record."""

    SHIFT_ONLY = "shift_only"
    TRACKING_ONLY = "tracking_only"
    MERGED = "merged"


@dataclass(frozen=True)
class AttendanceRecord:
    """Read-time projection of one staff member's day; never stored.

    Identity is inherited from the source: the shift for shift-only and merged records,
    the time-tracking record for tracking-only ones.
    """

    kind: ReconcileKind
    staff_id: int
    work_date: date
    status: AttendanceStatus
    shift_id: Optional[int] = None
    tracking_id: Optional[int] = None
    staff_name: Optional[str] = None
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    break_minutes: int = 0
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    notes: Optional[str] = None
    in_zone: Optional[bool] = None
    deltas: TimeDeltas = field(default_factory=TimeDeltas)
    money: MoneyBreakdown = field(default_factory=MoneyBreakdown)

    @property
    def record_id(self) -> str:
        if self.kind == ReconcileKind.TRACKING_ONLY:
            return f"tracking-{self.tracking_id}"
        return f"shift-{self.shift_id}"

    @property
    def is_worked(self) -> bool:
        return self.status in (AttendanceStatus.CHECKED_OUT, AttendanceStatus.COMPLETED)

    def as_dict(self) -> dict:
        return {
            "id": self.record_id,
            "source": self.kind.value,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "shift_id": self.shift_id,
            "tracking_id": self.tracking_id,
            "scheduled_start": self.scheduled_start.strftime("%H:%M") if self.scheduled_start else None,
            "scheduled_end": self.scheduled_end.strftime("%H:%M") if self.scheduled_end else None,
            "actual_start": self.actual_start.isoformat() if self.actual_start else None,
            "actual_end": self.actual_end.isoformat() if self.actual_end else None,
            "notes": self.notes,
            "in_zone": self.in_zone,
            "late_minutes": self.deltas.late_minutes,
            "early_leave_minutes": self.deltas.early_leave_minutes,
            "overtime_minutes": self.deltas.overtime_minutes,
            "work_duration": self.deltas.work_duration,
            **self.money.as_dict(),
        }
