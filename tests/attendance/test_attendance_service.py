from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from src.shift_payroll.shift_payroll.attendance.model import ReconcileKind
from src.shift_payroll.shift_payroll.core.enums import AttendanceStatus, ShiftStatus, TrackingStatus
from src.shift_payroll.shift_payroll.core.exceptions import ValidationError
from src.shift_payroll.shift_payroll.shifts.model import Shift
from src.shift_payroll.shift_payroll.timetracking.model import TimeTrackingRecord
from tests.fakes import InMemoryShifts, InMemoryTimeTracking, build_test_container, make_staff

DAY = date(2024, 5, 6)


def _shift(shift_id, staff_id, status=ShiftStatus.SCHEDULED, day=DAY):
    return Shift(shift_id=shift_id, staff_id=staff_id, work_date=day, start_time=time(8, 0), end_time=time(17, 0), status=status)


@pytest.fixture()
def container():
    shifts = InMemoryShifts([_shift(1, 1), _shift(2, 2, status=ShiftStatus.NO_SHOW)])
    records = InMemoryTimeTracking(
        [
            TimeTrackingRecord(
                record_id=1,
                staff_id=1,
                work_date=DAY,
                actual_start=datetime(2024, 5, 6, 8, 15),
                actual_end=datetime(2024, 5, 6, 17, 0),
                status=TrackingStatus.COMPLETED,
            ),
            TimeTrackingRecord(
                record_id=2,
                staff_id=7,
                work_date=DAY,
                actual_start=datetime(2024, 5, 6, 9, 0),
                status=TrackingStatus.IN_PROGRESS,
            ),
        ]
    )
    return build_test_container(
        make_staff(1, full_name="Anna", penalty_type="per_minute", penalty_amount=Decimal("10")),
        make_staff(2, full_name="Olga", absence_penalty=Decimal("500")),
        shifts_repo=shifts,
        time_tracking_repo=records,
    )


def test_list_range_annotates_deltas_and_money(container):
    rows = container.attendance_service.list_range(start=DAY, end=DAY)
    by_id = {r.record_id: r for r in rows}

    anna = by_id["shift-1"]
    assert anna.kind == ReconcileKind.MERGED
    assert anna.staff_name == "Anna"
    assert anna.deltas.late_minutes == 15
    assert anna.deltas.work_duration == 525
    assert anna.money.late_amount == Decimal("150.00")

    olga = by_id["shift-2"]
    assert olga.status == AttendanceStatus.NO_SHOW
    assert olga.money.unauthorized_absence_amount == Decimal("500.00")


def test_record_without_directory_entry_keeps_zero_money(container):
    rows = container.attendance_service.list_range(start=DAY, end=DAY)
    orphan = [r for r in rows if r.kind == ReconcileKind.TRACKING_ONLY]

    assert [r.record_id for r in orphan] == ["tracking-2"]
    assert orphan[0].staff_name is None
    assert orphan[0].status == AttendanceStatus.CHECKED_IN
    assert orphan[0].money.penalties == Decimal("0")


def test_staff_filter(container):
    rows = container.attendance_service.list_range(start=DAY, end=DAY, staff_id=2)
    assert [r.record_id for r in rows] == ["shift-2"]


def test_reversed_range_rejected(container):
    with pytest.raises(ValidationError):
        container.attendance_service.list_range(start=date(2024, 5, 7), end=DAY)


def test_fetch_failure_fails_the_whole_read():
    class BrokenTracking(InMemoryTimeTracking):
        def list_range(self, *, start, end, staff_id=None):
            raise ConnectionError("time tracking store unavailable")

    container = build_test_container(
        make_staff(1),
        shifts_repo=InMemoryShifts([_shift(1, 1)]),
        time_tracking_repo=BrokenTracking(),
    )
    with pytest.raises(ConnectionError):
        container.attendance_service.list_range(start=DAY, end=DAY)
