"""Join planned shifts and actual time-tracking records into one attendance timeline.

The join key is ``(staff_id, calendar day)``. Every input record ends up in the output:
shifts in input order first, then time-tracking records nobody claimed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional

from ..common.datetime_utils import as_day
from ..core.enums import AttendanceStatus, ShiftStatus, TrackingStatus
from ..shifts.model import Shift
from ..timetracking.model import TimeTrackingRecord
from .model import AttendanceRecord, ReconcileKind

# late and pending_approval both collapse into absent; kept as-is and overridable.
DEFAULT_STATUS_MAP: Mapping[TrackingStatus, AttendanceStatus] = {
    TrackingStatus.SCHEDULED: AttendanceStatus.SCHEDULED,
    TrackingStatus.COMPLETED: AttendanceStatus.CHECKED_OUT,
    TrackingStatus.IN_PROGRESS: AttendanceStatus.CHECKED_IN,
    TrackingStatus.LATE: AttendanceStatus.ABSENT,
    TrackingStatus.PENDING_APPROVAL: AttendanceStatus.ABSENT,
}

_SHIFT_ONLY_STATUS: Mapping[ShiftStatus, AttendanceStatus] = {
    ShiftStatus.COMPLETED: AttendanceStatus.COMPLETED,
    ShiftStatus.CANCELLED: AttendanceStatus.CANCELLED,
    ShiftStatus.NO_SHOW: AttendanceStatus.NO_SHOW,
}

Key = tuple[int, date]


@dataclass
class AttendanceReconciler:
    status_map: Mapping[TrackingStatus, AttendanceStatus] = field(default_factory=lambda: dict(DEFAULT_STATUS_MAP))

    def map_status(self, record: TimeTrackingRecord) -> AttendanceStatus:
        if record.status is not None and record.status in self.status_map:
            return self.status_map[record.status]
        # No usable stored status: derive it from what was actually recorded.
        if record.actual_end is not None:
            return AttendanceStatus.CHECKED_OUT
        if record.actual_start is not None:
            return AttendanceStatus.CHECKED_IN
        return AttendanceStatus.SCHEDULED

    def reconcile(
        self,
        shifts: Iterable[Shift],
        records: Iterable[TimeTrackingRecord],
        *,
        staff_names: Optional[Mapping[int, str]] = None,
    ) -> list[AttendanceRecord]:
        shifts = list(shifts)
        names = staff_names or {}

        by_key: dict[Key, list[TimeTrackingRecord]] = {}
        for r in records:
            by_key.setdefault((r.staff_id, as_day(r.work_date)), []).append(r)

        # A day may hold a cancelled shift next to its replacement; the active one claims the record.
        claimant: dict[Key, int] = {}
        for idx, s in enumerate(shifts):
            key = (s.staff_id, as_day(s.work_date))
            if key not in claimant or (s.is_active and not shifts[claimant[key]].is_active):
                claimant[key] = idx

        out: list[AttendanceRecord] = []
        for idx, s in enumerate(shifts):
            key = (s.staff_id, as_day(s.work_date))
            pending = by_key.get(key)
            if claimant.get(key) == idx and pending:
                out.append(self._merge(s, pending.pop(0), names.get(s.staff_id)))
            else:
                out.append(self._from_shift(s, names.get(s.staff_id)))

        for pending in by_key.values():
            for r in pending:
                out.append(self._from_tracking(r, names.get(r.staff_id)))
        return out

    def _merge(self, shift: Shift, record: TimeTrackingRecord, name: Optional[str]) -> AttendanceRecord:
        return AttendanceRecord(
            kind=ReconcileKind.MERGED,
            staff_id=shift.staff_id,
            work_date=as_day(shift.work_date),
            status=self.map_status(record),
            shift_id=shift.shift_id,
            tracking_id=record.record_id,
            staff_name=name,
            scheduled_start=shift.start_time,
            scheduled_end=shift.end_time,
            break_minutes=shift.break_minutes,
            actual_start=record.actual_start,
            actual_end=record.actual_end,
            notes=record.notes or shift.notes,
            in_zone=record.in_zone,
            deltas=record.stored_deltas,
        )

    def _from_shift(self, shift: Shift, name: Optional[str]) -> AttendanceRecord:
        return AttendanceRecord(
            kind=ReconcileKind.SHIFT_ONLY,
            staff_id=shift.staff_id,
            work_date=as_day(shift.work_date),
            status=_SHIFT_ONLY_STATUS.get(shift.status, AttendanceStatus.SCHEDULED),
            shift_id=shift.shift_id,
            staff_name=name,
            scheduled_start=shift.start_time,
            scheduled_end=shift.end_time,
            break_minutes=shift.break_minutes,
            notes=f"Shift: {shift.label}",
        )

    def _from_tracking(self, record: TimeTrackingRecord, name: Optional[str]) -> AttendanceRecord:
        return AttendanceRecord(
            kind=ReconcileKind.TRACKING_ONLY,
            staff_id=record.staff_id,
            work_date=as_day(record.work_date),
            status=self.map_status(record),
            tracking_id=record.record_id,
            staff_name=name,
            actual_start=record.actual_start,
            actual_end=record.actual_end,
            notes=record.notes,
            in_zone=record.in_zone,
            deltas=record.stored_deltas,
        )
