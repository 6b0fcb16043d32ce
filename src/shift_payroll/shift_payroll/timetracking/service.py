from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id
from ..core.enums import ShiftStatus, TrackingStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..geofence.validator import Coordinate, GeofenceResult, GeofenceValidator
from ..payroll.deltas import TimeDeltaCalculator
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..shifts.scheduler import ShiftScheduler
from ..staff.repository import StaffRepository
from .model import TimeTrackingRecord
from .repository import TimeTrackingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockResult:
    record: TimeTrackingRecord
    shift: Optional[Shift]
    geofence: GeofenceResult


def _combine_zone(previous: Optional[bool], current: Optional[bool]) -> Optional[bool]:
    if previous is None:
        return current
    if current is None:
        return previous
    return previous and current


class TimeTrackingService:
    """Check-in/check-out of staff, keeping the day's shift status in step.

    The geofence result only annotates the record; an out-of-zone attempt still succeeds.
    """

    def __init__(
        self,
        records: TimeTrackingRepository,
        shifts: ShiftRepository,
        scheduler: ShiftScheduler,
        staff: StaffRepository,
        *,
        geofence: GeofenceValidator,
        calculator: Optional[TimeDeltaCalculator] = None,
    ):
        self._records = records
        self._shifts = shifts
        self._scheduler = scheduler
        self._staff = staff
        self._geofence = geofence
        self._calculator = calculator or TimeDeltaCalculator()

    def _require_staff(self, staff_id) -> int:
        staff_id = require_positive_id(staff_id, "staff_id")
        if self._staff.get_by_id(staff_id) is None:
            raise NotFoundError(f"Staff {staff_id} not found")
        return staff_id

    def _advance_shift(self, shift: Shift, *, finished: bool) -> Shift:
        if shift.status == ShiftStatus.SCHEDULED:
            shift = self._scheduler.check_in(shift.shift_id)
        if finished and shift.status == ShiftStatus.IN_PROGRESS:
            shift = self._scheduler.check_out(shift.shift_id)
        return shift

    def _check_zone(self, staff_id: int, coordinate: Optional[Coordinate], action: str) -> GeofenceResult:
        result = self._geofence.evaluate(coordinate)
        if result.checked and not result.in_zone:
            logger.info(
                "%s outside geofence",
                action,
                extra={"staff_id": staff_id, "distance_m": result.distance_m, "radius_m": result.radius_m},
            )
        return result

    def clock_in(self, staff_id, *, coordinate: Optional[Coordinate] = None, now: Optional[datetime] = None) -> ClockResult:
        now = now or now_local()
        today = now.date()
        staff_id = self._require_staff(staff_id)

        if self._records.get_for_staff_and_date(staff_id=staff_id, work_date=today):
            raise ValidationError("Already checked in today")

        zone = self._check_zone(staff_id, coordinate, "check-in")
        shift = self._shifts.find_active(staff_id=staff_id, work_date=today)

        late = None
        if shift is not None:
            deltas = self._calculator.compute(
                scheduled_start=shift.start_time, scheduled_end=None, actual_start=now, actual_end=None
            )
            late = deltas.late_minutes
            if shift.status == ShiftStatus.SCHEDULED:
                shift = self._scheduler.check_in(shift.shift_id)

        record = self._records.create(
            TimeTrackingRecord(
                record_id=0,
                staff_id=staff_id,
                work_date=today,
                actual_start=now,
                status=TrackingStatus.IN_PROGRESS,
                late_minutes=late,
                shift_id=shift.shift_id if shift else None,
                in_zone=zone.in_zone,
            )
        )
        logger.info("checked in", extra={"staff_id": staff_id, "record_id": record.record_id, "late_minutes": late})
        return ClockResult(record=record, shift=shift, geofence=zone)

    def clock_out(self, staff_id, *, coordinate: Optional[Coordinate] = None, now: Optional[datetime] = None) -> ClockResult:
        now = now or now_local()
        today = now.date()
        staff_id = self._require_staff(staff_id)

        record = self._records.get_for_staff_and_date(staff_id=staff_id, work_date=today)
        if not record or record.actual_start is None:
            raise ValidationError("Not checked in today")
        if record.actual_end is not None:
            raise ValidationError("Already checked out today")
        if now < record.actual_start:
            raise ValidationError("Check-out cannot be earlier than check-in")

        zone = self._check_zone(staff_id, coordinate, "check-out")
        shift = self._shifts.find_active(staff_id=staff_id, work_date=today)

        deltas = self._calculator.compute(
            scheduled_start=shift.start_time if shift else None,
            scheduled_end=shift.end_time if shift else None,
            actual_start=record.actual_start,
            actual_end=now,
            break_minutes=shift.break_minutes if shift else 0,
            stored=record.stored_deltas,
        )

        if shift is not None:
            shift = self._advance_shift(shift, finished=True)

        updated = replace(
            record,
            actual_end=now,
            status=TrackingStatus.COMPLETED,
            late_minutes=deltas.late_minutes,
            early_leave_minutes=deltas.early_leave_minutes,
            overtime_minutes=deltas.overtime_minutes,
            work_duration=deltas.work_duration,
            shift_id=shift.shift_id if shift else record.shift_id,
            in_zone=_combine_zone(record.in_zone, zone.in_zone),
        )
        self._records.update(updated)
        logger.info("checked out", extra={"staff_id": staff_id, "record_id": record.record_id})
        return ClockResult(record=updated, shift=shift, geofence=zone)

    def manual_entry(
        self,
        staff_id,
        *,
        work_date: date,
        actual_start: Optional[time],
        actual_end: Optional[time],
        notes: Optional[str] = None,
    ) -> TimeTrackingRecord:
        """Administrator entry or correction for one day; deltas are recomputed against the day's shift."""

        staff_id = self._require_staff(staff_id)
        if actual_start is None and actual_end is None:
            raise ValidationError("At least one of check-in or check-out is required")
        if actual_start is not None and actual_end is not None and actual_end < actual_start:
            raise ValidationError("Check-out cannot be earlier than check-in")

        start_dt = datetime.combine(work_date, actual_start) if actual_start else None
        end_dt = datetime.combine(work_date, actual_end) if actual_end else None
        shift = self._shifts.find_active(staff_id=staff_id, work_date=work_date)
        deltas = self._calculator.compute(
            scheduled_start=shift.start_time if shift else None,
            scheduled_end=shift.end_time if shift else None,
            actual_start=start_dt,
            actual_end=end_dt,
            break_minutes=shift.break_minutes if shift else 0,
        )

        if start_dt and end_dt:
            status = TrackingStatus.COMPLETED
        elif start_dt:
            status = TrackingStatus.IN_PROGRESS
        else:
            status = TrackingStatus.PENDING_APPROVAL

        # A worked day must not be swept into no_show later.
        if shift is not None and start_dt is not None:
            shift = self._advance_shift(shift, finished=end_dt is not None)

        existing = self._records.get_for_staff_and_date(staff_id=staff_id, work_date=work_date)
        record = TimeTrackingRecord(
            record_id=existing.record_id if existing else 0,
            staff_id=staff_id,
            work_date=work_date,
            actual_start=start_dt,
            actual_end=end_dt,
            status=status,
            late_minutes=deltas.late_minutes if start_dt and shift else None,
            early_leave_minutes=deltas.early_leave_minutes if end_dt and shift else None,
            overtime_minutes=deltas.overtime_minutes if end_dt and shift else None,
            work_duration=deltas.work_duration if start_dt and end_dt else None,
            notes=(notes or "").strip() or (existing.notes if existing else None),
            shift_id=shift.shift_id if shift else None,
            in_zone=existing.in_zone if existing else None,
            is_manual_entry=True,
        )
        if existing:
            self._records.update(record)
        else:
            record = self._records.create(record)
        logger.info("manual time entry saved", extra={"staff_id": staff_id, "record_id": record.record_id})
        return record
