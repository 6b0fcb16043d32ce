from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class Shift:
    """Domain entity: one staff member's planned work interval on one calendar day."""

    shift_id: int
    staff_id: int
    work_date: date
    start_time: time
    end_time: time
    status: ShiftStatus = ShiftStatus.SCHEDULED
    break_minutes: int = 0
    alternative_staff_id: Optional[int] = None
    notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status != ShiftStatus.CANCELLED

    @property
    def label(self) -> str:
        return f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"

    def as_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "staff_id": self.staff_id,
            "date": self.work_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status.value,
            "break_minutes": self.break_minutes,
            "alternative_staff_id": self.alternative_staff_id,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class NewShift:
    """Validated input for creating a shift."""

    staff_id: int
    work_date: date
    start_time: time
    end_time: time
    break_minutes: int = 0
    alternative_staff_id: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftTemplate:
    """Start/end applied to every generated day of a recurring schedule."""

    start_time: time
    end_time: time
    break_minutes: int = 0
    notes: Optional[str] = None


@dataclass
class BatchResult:
    """Counts returned by bulk operations; per-item problems never abort the batch."""

    created: int = 0
    skipped_existing: int = 0
    duplicates: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        return self.created + self.duplicates + self.failed

    def as_dict(self) -> dict:
        return {
            "created": self.created,
            "skipped_existing": self.skipped_existing,
            "duplicates": self.duplicates,
            "failed": self.failed,
        }
