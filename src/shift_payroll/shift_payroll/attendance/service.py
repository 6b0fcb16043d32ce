from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import period_of
from ..core.exceptions import ValidationError
from ..payroll.calculator.base import daily_rate
from ..payroll.deltas import TimeDeltaCalculator
from ..payroll.engine import PenaltyBonusEngine
from ..shifts.repository import ShiftRepository
from ..staff.model import StaffMember
from ..staff.policy import PayrollPolicy, PolicyDefaults, resolve_policy_or_default
from ..staff.repository import StaffRepository
from ..timetracking.repository import TimeTrackingRepository
from .model import AttendanceRecord
from .reconciler import AttendanceReconciler

logger = logging.getLogger(__name__)


class AttendanceService:
    """Fetch both event streams for a window, reconcile them, annotate minutes and money.

    A failed fetch fails the whole read; no partial timeline is returned.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        records: TimeTrackingRepository,
        staff: StaffRepository,
        *,
        reconciler: Optional[AttendanceReconciler] = None,
        calculator: Optional[TimeDeltaCalculator] = None,
        engine: Optional[PenaltyBonusEngine] = None,
        policy_defaults: PolicyDefaults = PolicyDefaults(),
    ):
        self._shifts = shifts
        self._records = records
        self._staff = staff
        self._reconciler = reconciler or AttendanceReconciler()
        self._calculator = calculator or TimeDeltaCalculator()
        self._engine = engine or PenaltyBonusEngine()
        self._defaults = policy_defaults

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> list[AttendanceRecord]:
        if start > end:
            raise ValidationError("Range start must not be after its end")

        shifts = self._shifts.list_range(start=start, end=end, staff_id=staff_id)
        records = self._records.list_range(start=start, end=end, staff_id=staff_id)
        directory = self._directory([s.staff_id for s in shifts] + [r.staff_id for r in records])

        reconciled = self._reconciler.reconcile(
            shifts,
            records,
            staff_names={sid: m.full_name for sid, m in directory.items()},
        )
        policies: dict[int, PayrollPolicy] = {}
        for sid, member in directory.items():
            policies[sid] = resolve_policy_or_default(member, self._defaults)

        out = [self.annotate(r, policies.get(r.staff_id)) for r in reconciled]
        logger.debug(
            "attendance reconciled",
            extra={"start": start.isoformat(), "end": end.isoformat(), "count": len(out)},
        )
        return out

    def annotate(self, record: AttendanceRecord, policy: Optional[PayrollPolicy]) -> AttendanceRecord:
        deltas = self._calculator.compute(
            scheduled_start=record.scheduled_start,
            scheduled_end=record.scheduled_end,
            actual_start=record.actual_start,
            actual_end=record.actual_end,
            break_minutes=record.break_minutes,
            stored=record.deltas,
        )
        if policy is None:
            return replace(record, deltas=deltas)

        money = self._engine.evaluate(
            policy=policy,
            deltas=deltas,
            status=record.status,
            prorated_base=daily_rate(policy, period_of(record.work_date)),
        )
        return replace(record, deltas=deltas, money=money)

    def _directory(self, staff_ids: Iterable[int]) -> dict[int, StaffMember]:
        found: dict[int, StaffMember] = {}
        for sid in set(staff_ids):
            member = self._staff.get_by_id(sid)
            if member is not None:
                found[sid] = member
        return found
