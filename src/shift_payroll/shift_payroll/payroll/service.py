from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..attendance.service import AttendanceService
from ..common.datetime_utils import period_range
from ..common.money import ZERO, to_money
from ..common.validators import require_positive_id
from ..core.enums import PayrollStatus
from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..staff.model import StaffMember
from ..staff.policy import PolicyDefaults, resolve_policy_or_default
from ..staff.repository import StaffRepository
from .aggregator import PayrollAggregator, payroll_total
from .model import Payroll, as_payroll
from .repository import FineRepository, PayrollRepository

logger = logging.getLogger(__name__)

_NEXT_STATUS = {
    PayrollStatus.DRAFT: PayrollStatus.APPROVED,
    PayrollStatus.APPROVED: PayrollStatus.PAID,
}


def _amount(value, field_name: str) -> Decimal:
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if amount < ZERO:
        raise ValidationError(f"{field_name} must be non-negative")
    return amount


class PayrollService:
    """Period payroll: read-time projection plus the explicit save/approve/pay lifecycle.

    ``lock_paid`` rejects edits of paid rows; when off, such edits go through with a warning.
    """

    def __init__(
        self,
        payrolls: PayrollRepository,
        fines: FineRepository,
        staff: StaffRepository,
        attendance: AttendanceService,
        *,
        aggregator: Optional[PayrollAggregator] = None,
        policy_defaults: PolicyDefaults = PolicyDefaults(),
        lock_paid: bool = False,
    ):
        self._payrolls = payrolls
        self._fines = fines
        self._staff = staff
        self._attendance = attendance
        self._aggregator = aggregator or PayrollAggregator()
        self._defaults = policy_defaults
        self._lock_paid = lock_paid

    # --- read side ----------------------------------------------------------------------------

    def calculate(self, staff_id: int, period: str) -> Payroll:
        period_range(period)
        member = self._require_staff(staff_id)
        persisted = self._payrolls.get_for_staff_period(staff_id=member.staff_id, period=period)
        if persisted is not None:
            return as_payroll(persisted, staff_name=persisted.staff_name or member.full_name)
        return self._compute(member, period)

    def list_period(self, period: str, staff_id: Optional[int] = None) -> list[Payroll]:
        """One row per staff member: the stored payroll or a virtual one."""

        days = period_range(period)
        if staff_id is not None:
            members = [self._require_staff(staff_id)]
        else:
            members = list(self._staff.list_active())

        persisted = {p.staff_id: p for p in self._payrolls.list_period(period=period, staff_id=staff_id)}
        known = {m.staff_id for m in members}
        for sid in persisted:
            if sid not in known:
                member = self._staff.get_by_id(sid)
                if member is not None:
                    members.append(member)

        records = self._attendance.list_range(start=days.start, end=days.end, staff_id=staff_id)
        fines = self._fines.list_period(period=period, staff_id=staff_id)

        out: list[Payroll] = []
        for member in members:
            stored = persisted.get(member.staff_id)
            if stored is not None:
                out.append(as_payroll(stored, staff_name=stored.staff_name or member.full_name))
                continue
            policy = resolve_policy_or_default(member, self._defaults)
            out.append(
                self._aggregator.aggregate(
                    policy=policy, period=period, records=records, fines=fines, staff_name=member.full_name
                )
            )
        return out

    # --- lifecycle ----------------------------------------------------------------------------

    def save(self, staff_id: int, period: str) -> Payroll:
        """Commit the current projection as a draft payroll."""

        member = self._require_staff(staff_id)
        if self._payrolls.get_for_staff_period(staff_id=member.staff_id, period=period) is not None:
            raise ValidationError(f"Payroll for staff {member.staff_id} in {period} already exists")

        virtual = self._compute(member, period)
        saved = self._payrolls.create(as_payroll(virtual, status=PayrollStatus.DRAFT))
        logger.info(
            "payroll saved",
            extra={"payroll_id": saved.payroll_id, "staff_id": saved.staff_id, "period": period},
        )
        return saved

    def recalculate(self, payroll_id: int) -> Payroll:
        current = self.get(payroll_id)
        if current.status != PayrollStatus.DRAFT:
            raise InvalidTransitionError(f"Only draft payrolls can be recalculated (status={current.status.value})")

        member = self._require_staff(current.staff_id)
        fresh = self._compute(member, current.period)
        updated = as_payroll(fresh, payroll_id=current.payroll_id, notes=current.notes)
        self._payrolls.update(updated)
        logger.info("payroll recalculated", extra={"payroll_id": current.payroll_id})
        return updated

    def approve(self, payroll_id: int) -> Payroll:
        return self._advance(payroll_id, PayrollStatus.APPROVED)

    def mark_paid(self, payroll_id: int) -> Payroll:
        return self._advance(payroll_id, PayrollStatus.PAID)

    def update(
        self,
        payroll_id: int,
        *,
        bonuses=None,
        deductions=None,
        notes: Optional[str] = None,
    ) -> Payroll:
        """Manual adjustment of bonuses/deductions/notes; the total keeps its floor at zero."""

        current = self.get(payroll_id)
        if current.status == PayrollStatus.PAID:
            if self._lock_paid:
                raise InvalidTransitionError("Paid payrolls are locked")
            logger.warning("editing a paid payroll", extra={"payroll_id": current.payroll_id})

        new_bonuses = current.bonuses if bonuses is None else _amount(bonuses, "bonuses")
        new_deductions = current.deductions if deductions is None else _amount(deductions, "deductions")
        updated = as_payroll(
            current,
            bonuses=new_bonuses,
            deductions=new_deductions,
            notes=current.notes if notes is None else (notes.strip() or None),
            total=payroll_total(current.base_salary, new_bonuses, new_deductions, current.penalties),
        )
        self._payrolls.update(updated)
        return updated

    def get(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFoundError(f"Payroll {payroll_id} not found")
        return payroll

    # --- helpers ------------------------------------------------------------------------------

    def _advance(self, payroll_id: int, target: PayrollStatus) -> Payroll:
        current = self.get(payroll_id)
        if _NEXT_STATUS.get(current.status) != target:
            raise InvalidTransitionError(
                f"Payroll {current.payroll_id}: {current.status.value} -> {target.value} is not allowed"
            )
        updated = as_payroll(current, status=target)
        self._payrolls.update(updated)
        logger.info(
            "payroll status changed",
            extra={"payroll_id": current.payroll_id, "from": current.status.value, "to": target.value},
        )
        return updated

    def _compute(self, member: StaffMember, period: str) -> Payroll:
        days = period_range(period)
        records = self._attendance.list_range(start=days.start, end=days.end, staff_id=member.staff_id)
        fines = self._fines.list_period(period=period, staff_id=member.staff_id)
        policy = resolve_policy_or_default(member, self._defaults)
        return self._aggregator.compute(
            policy=policy, period=period, records=records, fines=fines, staff_name=member.full_name
        )

    def _require_staff(self, staff_id) -> StaffMember:
        member = self._staff.get_by_id(require_positive_id(staff_id, "staff_id"))
        if member is None:
            raise NotFoundError(f"Staff {staff_id} not found")
        return member
