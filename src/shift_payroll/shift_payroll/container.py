from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.reconciler import AttendanceReconciler
from .attendance.service import AttendanceService
from .common.cache import ListCache
from .common.money import to_money
from .core.constants import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_GEOFENCE_RADIUS_M,
    DEFAULT_LIST_CACHE_TTL_SECONDS,
    DEFAULT_SHIFT_END,
    DEFAULT_SHIFT_START,
)
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .geofence.validator import Coordinate, GeofenceValidator
from .payroll.mysql_payroll_repository import MySQLFineRepository, MySQLPayrollRepository
from .payroll.repository import FineRepository, PayrollRepository
from .payroll.service import PayrollService
from .reports.service import ReportService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.scheduler import ShiftScheduler, default_template
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.policy import PolicyDefaults
from .staff.repository import StaffRepository
from .timetracking.mysql_time_tracking_repository import MySQLTimeTrackingRepository
from .timetracking.repository import TimeTrackingRepository
from .timetracking.service import TimeTrackingService


@dataclass(frozen=True)
class Container:
    cache: ListCache
    geofence: GeofenceValidator

    staff_repo: StaffRepository
    shifts_repo: ShiftRepository
    time_tracking_repo: TimeTrackingRepository
    payroll_repo: PayrollRepository
    fines_repo: FineRepository

    scheduler: ShiftScheduler
    time_tracking_service: TimeTrackingService
    attendance_service: AttendanceService
    payroll_service: PayrollService
    report_service: ReportService


def parse_location(raw: Optional[str]) -> Optional[Coordinate]:
    """Parse "lat,lon" into a Coordinate; blank means not configured."""
    if not raw or not str(raw).strip():
        return None
    parts = [p.strip() for p in str(raw).split(",")]
    if len(parts) != 2:
        raise ValidationError(f"INSTITUTION_LOCATION must be 'lat,lon', got {raw!r}")
    return Coordinate.parse({"lat": parts[0], "lon": parts[1]})


def assemble(
    *,
    staff_repo: StaffRepository,
    shifts_repo: ShiftRepository,
    time_tracking_repo: TimeTrackingRepository,
    payroll_repo: PayrollRepository,
    fines_repo: FineRepository,
    cache: ListCache,
    settings: Any = None,
) -> Container:
    """Wire services on top of already-built repositories (MySQL in the app, fakes in tests)."""

    def setting(name: str, default):
        return getattr(settings, name, default) if settings is not None else default

    geofence = GeofenceValidator(
        parse_location(setting("INSTITUTION_LOCATION", "")),
        radius_m=float(setting("GEOFENCE_RADIUS_M", DEFAULT_GEOFENCE_RADIUS_M)),
    )
    break_minutes = int(setting("DEFAULT_BREAK_MINUTES", DEFAULT_BREAK_MINUTES))
    scheduler = ShiftScheduler(
        shifts_repo,
        staff_repo,
        template=default_template(
            start=setting("DEFAULT_SHIFT_START", DEFAULT_SHIFT_START),
            end=setting("DEFAULT_SHIFT_END", DEFAULT_SHIFT_END),
            break_minutes=break_minutes,
        ),
        default_break_minutes=break_minutes,
    )
    policy_defaults = PolicyDefaults(
        absence_penalty=to_money(setting("ABSENCE_PENALTY_AMOUNT", "0")),
        punctuality_bonus=to_money(setting("PUNCTUALITY_BONUS_AMOUNT", "0")),
    )

    time_tracking_service = TimeTrackingService(
        time_tracking_repo,
        shifts_repo,
        scheduler,
        staff_repo,
        geofence=geofence,
    )
    attendance_service = AttendanceService(
        shifts_repo,
        time_tracking_repo,
        staff_repo,
        reconciler=AttendanceReconciler(),
        policy_defaults=policy_defaults,
    )
    payroll_service = PayrollService(
        payroll_repo,
        fines_repo,
        staff_repo,
        attendance_service,
        policy_defaults=policy_defaults,
        lock_paid=bool(setting("PAYROLL_LOCK_PAID", False)),
    )
    report_service = ReportService(attendance_service, payroll_service)

    return Container(
        cache=cache,
        geofence=geofence,
        staff_repo=staff_repo,
        shifts_repo=shifts_repo,
        time_tracking_repo=time_tracking_repo,
        payroll_repo=payroll_repo,
        fines_repo=fines_repo,
        scheduler=scheduler,
        time_tracking_service=time_tracking_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    ttl = getattr(settings, "LIST_CACHE_TTL_SECONDS", DEFAULT_LIST_CACHE_TTL_SECONDS) if settings else DEFAULT_LIST_CACHE_TTL_SECONDS
    cache = ListCache(ttl_seconds=float(ttl))

    return assemble(
        staff_repo=MySQLStaffRepository(conn, cache),
        shifts_repo=MySQLShiftRepository(conn, cache),
        time_tracking_repo=MySQLTimeTrackingRepository(conn, cache),
        payroll_repo=MySQLPayrollRepository(conn),
        fines_repo=MySQLFineRepository(conn),
        cache=cache,
        settings=settings,
    )
