from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, time, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import DateRange, is_working_day, parse_hhmm, week_start
from ..common.validators import require_positive_id, require_present
from ..core.constants import BULK_SHIFT_NOTE, DEFAULT_SHIFT_END, DEFAULT_SHIFT_START
from ..core.enums import ShiftStatus
from ..core.exceptions import (
    DomainError,
    DuplicateShiftError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..staff.repository import StaffRepository
from .model import BatchResult, NewShift, Shift, ShiftTemplate
from .repository import ShiftRepository

logger = logging.getLogger(__name__)

# update_shift: leave the substitute as it is.
KEEP = object()

# completed, cancelled and no_show are terminal.
_TRANSITIONS: dict[ShiftStatus, frozenset[ShiftStatus]] = {
    ShiftStatus.SCHEDULED: frozenset({ShiftStatus.IN_PROGRESS, ShiftStatus.CANCELLED, ShiftStatus.NO_SHOW}),
    ShiftStatus.IN_PROGRESS: frozenset({ShiftStatus.COMPLETED, ShiftStatus.CANCELLED}),
}


def can_transition(current: ShiftStatus, target: ShiftStatus) -> bool:
    return target in _TRANSITIONS.get(current, frozenset())


def default_template(*, start: str = DEFAULT_SHIFT_START, end: str = DEFAULT_SHIFT_END, break_minutes: int = 0) -> ShiftTemplate:
    return ShiftTemplate(
        start_time=parse_hhmm(start),
        end_time=parse_hhmm(end),
        break_minutes=break_minutes,
        notes=BULK_SHIFT_NOTE,
    )


class ShiftScheduler:
    """Creates shifts one at a time or in duplicate-safe batches, and drives the shift state machine."""

    def __init__(
        self,
        shifts: ShiftRepository,
        staff: Optional[StaffRepository] = None,
        *,
        template: Optional[ShiftTemplate] = None,
        default_break_minutes: int = 0,
    ):
        self._shifts = shifts
        self._staff = staff
        self._template = template or default_template(break_minutes=default_break_minutes)
        self._default_break_minutes = int(default_break_minutes)

    @property
    def template(self) -> ShiftTemplate:
        return self._template

    # --- single shift -------------------------------------------------------------------------

    def validate(
        self,
        *,
        staff_id,
        work_date: Optional[date],
        start_time: Optional[time],
        end_time: Optional[time],
        break_minutes: Optional[int] = None,
        alternative_staff_id=None,
        notes: Optional[str] = None,
    ) -> NewShift:
        staff_id = require_positive_id(staff_id, "staff_id")
        require_present(work_date, "date")
        require_present(start_time, "start time")
        require_present(end_time, "end time")
        if start_time >= end_time:
            raise ValidationError("Shift start must be before its end on the same day")

        breaks = self._default_break_minutes if break_minutes is None else int(break_minutes)
        if breaks < 0:
            raise ValidationError("break_minutes must be non-negative")

        alt = require_positive_id(alternative_staff_id, "alternative_staff_id") if alternative_staff_id else None
        if alt == staff_id:
            raise ValidationError("A staff member cannot substitute for themselves")

        return NewShift(
            staff_id=staff_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            break_minutes=breaks,
            alternative_staff_id=alt,
            notes=(notes or "").strip() or None,
        )

    def create_shift(self, **data) -> Shift:
        """Validate and persist one shift.

        Raises ValidationError, NotFoundError or DuplicateShiftError; nothing is swallowed here.
        """

        new = self.validate(**data)
        self._ensure_staff(new.staff_id)
        if new.alternative_staff_id:
            self._ensure_staff(new.alternative_staff_id)

        if self._shifts.find_active(staff_id=new.staff_id, work_date=new.work_date):
            raise DuplicateShiftError(new.staff_id, new.work_date)

        shift = self._shifts.create(new)
        logger.info(
            "shift created",
            extra={"shift_id": shift.shift_id, "staff_id": shift.staff_id, "work_date": shift.work_date.isoformat()},
        )
        return shift

    def update_shift(
        self,
        shift_id: int,
        *,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        break_minutes: Optional[int] = None,
        alternative_staff_id=KEEP,
        notes: Optional[str] = None,
    ) -> Shift:
        shift = self.get(shift_id)
        if shift.status != ShiftStatus.SCHEDULED:
            raise InvalidTransitionError(f"Only scheduled shifts can be edited (status={shift.status.value})")

        new = self.validate(
            staff_id=shift.staff_id,
            work_date=shift.work_date,
            start_time=start_time or shift.start_time,
            end_time=end_time or shift.end_time,
            break_minutes=shift.break_minutes if break_minutes is None else break_minutes,
            alternative_staff_id=shift.alternative_staff_id if alternative_staff_id is KEEP else alternative_staff_id,
            notes=notes if notes is not None else shift.notes,
        )
        if new.alternative_staff_id and new.alternative_staff_id != shift.alternative_staff_id:
            self._ensure_staff(new.alternative_staff_id)

        self._shifts.update_details(
            shift_id=shift.shift_id,
            start_time=new.start_time,
            end_time=new.end_time,
            break_minutes=new.break_minutes,
            alternative_staff_id=new.alternative_staff_id,
            notes=new.notes,
        )
        return replace(
            shift,
            start_time=new.start_time,
            end_time=new.end_time,
            break_minutes=new.break_minutes,
            alternative_staff_id=new.alternative_staff_id,
            notes=new.notes,
        )

    def get(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError(f"Shift {shift_id} not found")
        return shift

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> Sequence[Shift]:
        if start > end:
            raise ValidationError("Range start must not be after its end")
        return self._shifts.list_range(start=start, end=end, staff_id=staff_id)

    # --- state machine ------------------------------------------------------------------------

    def transition(self, shift_id: int, target: ShiftStatus) -> Shift:
        shift = self.get(shift_id)
        if not can_transition(shift.status, target):
            raise InvalidTransitionError(f"Shift {shift.shift_id}: {shift.status.value} -> {target.value} is not allowed")
        self._shifts.update_status(shift_id=shift.shift_id, status=target)
        logger.info(
            "shift status changed",
            extra={"shift_id": shift.shift_id, "from": shift.status.value, "to": target.value},
        )
        return replace(shift, status=target)

    def check_in(self, shift_id: int) -> Shift:
        return self.transition(shift_id, ShiftStatus.IN_PROGRESS)

    def check_out(self, shift_id: int) -> Shift:
        return self.transition(shift_id, ShiftStatus.COMPLETED)

    def cancel(self, shift_id: int) -> Shift:
        return self.transition(shift_id, ShiftStatus.CANCELLED)

    def mark_no_shows(self, as_of: date) -> int:
        """Shifts still scheduled on a day before ``as_of`` become no_show."""
        count = 0
        for shift in self._shifts.list_scheduled_before(as_of):
            if self._shifts.update_status(shift_id=shift.shift_id, status=ShiftStatus.NO_SHOW):
                count += 1
        if count:
            logger.info("shifts marked no_show", extra={"count": count, "as_of": as_of.isoformat()})
        return count

    # --- batches ------------------------------------------------------------------------------

    def bulk_generate(
        self,
        staff_ids: Iterable[int],
        date_range: DateRange,
        template: Optional[ShiftTemplate] = None,
        *,
        today: Optional[date] = None,
    ) -> BatchResult:
        """Create a Monday-Friday shift for every staff member on every day of [today, range end].

        Idempotent: days that already have a non-cancelled shift are skipped, and a duplicate
        rejected by the store is counted rather than raised.
        """

        template = template or self._template
        if template.start_time >= template.end_time:
            raise ValidationError("Template start must be before its end")

        today = today or date.today()
        first_day = max(today, date_range.start)
        days = [d for d in DateRange(first_day, date_range.end).days() if is_working_day(d)]
        staff_list = list(dict.fromkeys(int(s) for s in staff_ids))

        candidates = [
            NewShift(
                staff_id=staff_id,
                work_date=day,
                start_time=template.start_time,
                end_time=template.end_time,
                break_minutes=template.break_minutes,
                notes=template.notes,
            )
            for staff_id in staff_list
            for day in days
        ]
        result = self._run_batch(candidates, window=DateRange(first_day, date_range.end))
        logger.info(
            "bulk shift generation finished",
            extra={"staff_count": len(staff_list), "days": len(days), "result": result.as_dict()},
        )
        return result

    def copy_week(self, from_week: date, to_week: date, staff_ids: Optional[Iterable[int]] = None) -> BatchResult:
        """Replicate one Monday-Sunday week's non-cancelled shifts into another week."""

        source_start = week_start(from_week)
        target_start = week_start(to_week)
        if source_start == target_start:
            raise ValidationError("Source and target weeks must differ")

        wanted = {int(s) for s in staff_ids} if staff_ids is not None else None
        source = [
            s
            for s in self._shifts.list_range(start=source_start, end=source_start + timedelta(days=6))
            if s.is_active and (wanted is None or s.staff_id in wanted)
        ]
        offset = target_start - source_start
        candidates = [
            NewShift(
                staff_id=s.staff_id,
                work_date=s.work_date + offset,
                start_time=s.start_time,
                end_time=s.end_time,
                break_minutes=s.break_minutes,
                alternative_staff_id=s.alternative_staff_id,
                notes=s.notes,
            )
            for s in source
        ]
        result = self._run_batch(candidates, window=DateRange(target_start, target_start + timedelta(days=6)))
        logger.info("week copied", extra={"from": source_start.isoformat(), "to": target_start.isoformat(), "result": result.as_dict()})
        return result

    def _run_batch(self, candidates: list[NewShift], *, window: DateRange) -> BatchResult:
        result = BatchResult()
        if not candidates:
            return result

        # One snapshot per invocation; concurrent runs rely on the store's uniqueness constraint.
        taken: set[tuple[int, date]] = set()
        if window.start <= window.end:
            taken = {
                (s.staff_id, s.work_date)
                for s in self._shifts.list_range(start=window.start, end=window.end)
                if s.is_active
            }

        missing_staff: set[int] = set()
        checked_staff: set[int] = set()
        for new in candidates:
            key = (new.staff_id, new.work_date)
            if key in taken:
                result.skipped_existing += 1
                continue

            try:
                if new.staff_id in missing_staff:
                    raise NotFoundError(f"Staff {new.staff_id} not found")
                if new.staff_id not in checked_staff:
                    try:
                        self._ensure_staff(new.staff_id)
                    except NotFoundError:
                        missing_staff.add(new.staff_id)
                        raise
                    checked_staff.add(new.staff_id)
                self._shifts.create(new)
                result.created += 1
            except DuplicateShiftError:
                logger.debug("shift already scheduled", extra={"staff_id": new.staff_id, "work_date": new.work_date.isoformat()})
                result.duplicates += 1
            except DomainError as e:
                logger.warning(
                    "shift skipped: %s",
                    e,
                    extra={"staff_id": new.staff_id, "work_date": new.work_date.isoformat()},
                )
                result.failed += 1
                continue
            except Exception:
                logger.exception(
                    "shift creation failed, continuing batch",
                    extra={"staff_id": new.staff_id, "work_date": new.work_date.isoformat()},
                )
                result.failed += 1
                continue
            taken.add(key)

        return result

    def _ensure_staff(self, staff_id: int) -> None:
        if self._staff is not None and self._staff.get_by_id(staff_id) is None:
            raise NotFoundError(f"Staff {staff_id} not found")
