from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, time
from decimal import Decimal
from typing import Optional

from src.shift_payroll.shift_payroll.common.cache import ListCache
from src.shift_payroll.shift_payroll.common.datetime_utils import period_of
from src.shift_payroll.shift_payroll.container import assemble
from src.shift_payroll.shift_payroll.core.enums import ShiftStatus
from src.shift_payroll.shift_payroll.core.exceptions import DuplicateShiftError, ValidationError
from src.shift_payroll.shift_payroll.payroll.model import Fine, Payroll, as_payroll
from src.shift_payroll.shift_payroll.shifts.model import NewShift, Shift
from src.shift_payroll.shift_payroll.staff.model import StaffMember
from src.shift_payroll.shift_payroll.timetracking.model import TimeTrackingRecord


def make_staff(staff_id: int = 1, **kwargs) -> StaffMember:
    values = {
        "full_name": f"Staff {staff_id}",
        "salary_type": "month",
        "salary": Decimal("30000"),
        "shift_rate": Decimal("0"),
        "penalty_type": "fixed",
        "penalty_amount": Decimal("0"),
    }
    values.update(kwargs)
    return StaffMember(staff_id=staff_id, **values)


@dataclass
class InMemoryStaff:
    members: dict[int, StaffMember] = field(default_factory=dict)

    @classmethod
    def of(cls, *members: StaffMember) -> "InMemoryStaff":
        return cls({m.staff_id: m for m in members})

    def get_by_id(self, staff_id: int) -> Optional[StaffMember]:
        return self.members.get(staff_id)

    def list_active(self):
        return [m for m in self.members.values() if m.is_active]


class InMemoryShifts:
    """Enforces at most one non-cancelled shift per (staff_id, work_date), like the MySQL unique key."""

    def __init__(self, shifts=()):
        self._shifts: dict[int, Shift] = {}
        self._id = 0
        self.create_calls = 0
        self.list_calls = 0
        for s in shifts:
            self._id = max(self._id, s.shift_id)
            self._shifts[s.shift_id] = s

    def create(self, new: NewShift) -> Shift:
        self.create_calls += 1
        if self.find_active(staff_id=new.staff_id, work_date=new.work_date):
            raise DuplicateShiftError(new.staff_id, new.work_date)
        self._id += 1
        shift = Shift(
            shift_id=self._id,
            staff_id=new.staff_id,
            work_date=new.work_date,
            start_time=new.start_time,
            end_time=new.end_time,
            break_minutes=new.break_minutes,
            alternative_staff_id=new.alternative_staff_id,
            notes=new.notes,
        )
        self._shifts[shift.shift_id] = shift
        return shift

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self._shifts.get(shift_id)

    def find_active(self, *, staff_id: int, work_date: date) -> Optional[Shift]:
        for s in self._shifts.values():
            if s.staff_id == staff_id and s.work_date == work_date and s.is_active:
                return s
        return None

    def list_range(self, *, start: date, end: date, staff_id=None, status=None):
        self.list_calls += 1
        return [
            s
            for s in sorted(self._shifts.values(), key=lambda x: (x.work_date, x.shift_id))
            if start <= s.work_date <= end
            and (staff_id is None or s.staff_id == staff_id)
            and (status is None or s.status == status)
        ]

    def list_scheduled_before(self, day: date):
        return [s for s in self._shifts.values() if s.status == ShiftStatus.SCHEDULED and s.work_date < day]

    def update_status(self, *, shift_id: int, status: ShiftStatus) -> bool:
        if shift_id not in self._shifts:
            return False
        self._shifts[shift_id] = replace(self._shifts[shift_id], status=status)
        return True

    def update_details(self, *, shift_id: int, start_time: time, end_time: time, break_minutes: int,
                       alternative_staff_id=None, notes=None) -> bool:
        if shift_id not in self._shifts:
            return False
        self._shifts[shift_id] = replace(
            self._shifts[shift_id],
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            alternative_staff_id=alternative_staff_id,
            notes=notes,
        )
        return True

    def all(self) -> list[Shift]:
        return list(self._shifts.values())


class RacingShifts(InMemoryShifts):
    """Snapshot never sees existing rows, as if another run inserted them after the snapshot."""

    def list_range(self, *, start: date, end: date, staff_id=None, status=None):
        self.list_calls += 1
        return []


class FlakyShifts(InMemoryShifts):
    """Fails with a non-domain error on selected days."""

    def __init__(self, fail_on: set[date], shifts=()):
        super().__init__(shifts)
        self._fail_on = fail_on

    def create(self, new: NewShift) -> Shift:
        if new.work_date in self._fail_on:
            self.create_calls += 1
            raise ConnectionError("store timed out")
        return super().create(new)


class InMemoryTimeTracking:
    def __init__(self, records=()):
        self._records: dict[int, TimeTrackingRecord] = {}
        self._id = 0
        for r in records:
            self._id = max(self._id, r.record_id)
            self._records[r.record_id] = r

    def create(self, record: TimeTrackingRecord) -> TimeTrackingRecord:
        self._id += 1
        saved = replace(record, record_id=self._id)
        self._records[saved.record_id] = saved
        return saved

    def get_by_id(self, record_id: int) -> Optional[TimeTrackingRecord]:
        return self._records.get(record_id)

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[TimeTrackingRecord]:
        for r in self._records.values():
            if r.staff_id == staff_id and r.work_date == work_date:
                return r
        return None

    def list_range(self, *, start: date, end: date, staff_id=None):
        return [
            r
            for r in sorted(self._records.values(), key=lambda x: (x.work_date, x.record_id))
            if start <= r.work_date <= end and (staff_id is None or r.staff_id == staff_id)
        ]

    def update(self, record: TimeTrackingRecord) -> bool:
        if record.record_id not in self._records:
            return False
        self._records[record.record_id] = record
        return True


class InMemoryPayrolls:
    def __init__(self):
        self._rows: dict[int, Payroll] = {}
        self._id = 0

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        return self._rows.get(payroll_id)

    def get_for_staff_period(self, *, staff_id: int, period: str) -> Optional[Payroll]:
        for p in self._rows.values():
            if p.staff_id == staff_id and p.period == period:
                return p
        return None

    def list_period(self, *, period: str, staff_id=None):
        return [
            p for p in self._rows.values() if p.period == period and (staff_id is None or p.staff_id == staff_id)
        ]

    def create(self, payroll: Payroll) -> Payroll:
        if self.get_for_staff_period(staff_id=payroll.staff_id, period=payroll.period):
            raise ValidationError("duplicate payroll")
        self._id += 1
        saved = as_payroll(payroll, payroll_id=self._id)
        self._rows[self._id] = saved
        return saved

    def update(self, payroll: Payroll) -> bool:
        if payroll.payroll_id not in self._rows:
            return False
        self._rows[payroll.payroll_id] = payroll
        return True


@dataclass
class InMemoryFines:
    fines: list[Fine] = field(default_factory=list)

    def list_period(self, *, period: str, staff_id=None):
        return [
            f for f in self.fines if period_of(f.fine_date) == period and (staff_id is None or f.staff_id == staff_id)
        ]


class FakeSettings:
    INSTITUTION_LOCATION = "55.7558,37.6173"
    GEOFENCE_RADIUS_M = 100
    DEFAULT_SHIFT_START = "08:00"
    DEFAULT_SHIFT_END = "18:30"
    DEFAULT_BREAK_MINUTES = 0
    ABSENCE_PENALTY_AMOUNT = "0"
    PUNCTUALITY_BONUS_AMOUNT = "0"
    PAYROLL_LOCK_PAID = False


def build_test_container(*members: StaffMember, settings=FakeSettings, **repos):
    return assemble(
        staff_repo=repos.get("staff_repo") or InMemoryStaff.of(*members),
        shifts_repo=repos.get("shifts_repo") or InMemoryShifts(),
        time_tracking_repo=repos.get("time_tracking_repo") or InMemoryTimeTracking(),
        payroll_repo=repos.get("payroll_repo") or InMemoryPayrolls(),
        fines_repo=repos.get("fines_repo") or InMemoryFines(),
        cache=ListCache(ttl_seconds=0),
        settings=settings,
    )
