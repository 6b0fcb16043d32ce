from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..common.datetime_utils import period_range
from ..core.enums import PayrollStatus, SalaryType
from ..core.exceptions import StoreError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_decimal,
    normalize_mysql_date,
)
from .model import Fine, Payroll, as_payroll
from .repository import FineRepository, PayrollRepository

_COLUMNS = """
    p.payroll_id, p.staff_id, s.full_name, p.period, p.salary_type, p.shift_rate, p.base_salary,
    p.bonuses, p.deductions, p.penalties, p.late_penalties, p.early_leave_penalties,
    p.absence_penalties, p.total, p.worked_days, p.status, p.notes
"""


def _row_to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        staff_id=int(r["staff_id"]),
        staff_name=r.get("full_name"),
        period=str(r["period"]),
        salary_type=SalaryType(r.get("salary_type") or SalaryType.MONTH.value),
        shift_rate=normalize_decimal(r.get("shift_rate")),
        base_salary=normalize_decimal(r.get("base_salary")),
        bonuses=normalize_decimal(r.get("bonuses")),
        deductions=normalize_decimal(r.get("deductions")),
        penalties=normalize_decimal(r.get("penalties")),
        late_penalties=normalize_decimal(r.get("late_penalties")),
        early_leave_penalties=normalize_decimal(r.get("early_leave_penalties")),
        absence_penalties=normalize_decimal(r.get("absence_penalties")),
        total=normalize_decimal(r.get("total")),
        worked_days=int(r.get("worked_days") or 0),
        status=PayrollStatus(r.get("status") or PayrollStatus.DRAFT.value),
        notes=r.get("notes"),
    )


def _params(p: Payroll) -> tuple:
    return (
        p.salary_type.value,
        p.shift_rate,
        p.base_salary,
        p.bonuses,
        p.deductions,
        p.penalties,
        p.late_penalties,
        p.early_leave_penalties,
        p.absence_penalties,
        p.total,
        p.worked_days,
        p.status.value,
        p.notes,
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payrolls p LEFT JOIN staff s ON s.staff_id=p.staff_id WHERE p.payroll_id=%s",
                (int(payroll_id),),
            )
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def get_for_staff_period(self, *, staff_id: int, period: str) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payrolls p
                LEFT JOIN staff s ON s.staff_id=p.staff_id
                WHERE p.staff_id=%s AND p.period=%s
                """,
                (int(staff_id), period),
            )
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def list_period(self, *, period: str, staff_id: Optional[int] = None) -> Sequence[Payroll]:
        sql = f"SELECT {_COLUMNS} FROM payrolls p LEFT JOIN staff s ON s.staff_id=p.staff_id WHERE p.period=%s"
        params: list[object] = [period]
        if staff_id is not None:
            sql += " AND p.staff_id=%s"
            params.append(int(staff_id))
        sql += " ORDER BY p.staff_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_payroll(r) for r in fetchall(cur)]

    def create(self, payroll: Payroll) -> Payroll:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payrolls(
                        staff_id, period, salary_type, shift_rate, base_salary, bonuses, deductions,
                        penalties, late_penalties, early_leave_penalties, absence_penalties, total,
                        worked_days, status, notes)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (payroll.staff_id, payroll.period) + _params(payroll),
                )
                new_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError(f"Payroll for staff {payroll.staff_id} in {payroll.period} already exists") from e
            raise StoreError(f"Database error: {e}") from e
        return as_payroll(payroll, payroll_id=new_id)

    def update(self, payroll: Payroll) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET salary_type=%s, shift_rate=%s, base_salary=%s, bonuses=%s, deductions=%s,
                    penalties=%s, late_penalties=%s, early_leave_penalties=%s, absence_penalties=%s,
                    total=%s, worked_days=%s, status=%s, notes=%s
                WHERE payroll_id=%s
                """,
                _params(payroll) + (int(payroll.payroll_id),),
            )
            return cur.rowcount > 0


class MySQLFineRepository(FineRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_period(self, *, period: str, staff_id: Optional[int] = None) -> Sequence[Fine]:
        days = period_range(period)
        sql = """
            SELECT fine_id, staff_id, fine_date, amount, reason, approved
            FROM fines
            WHERE fine_date BETWEEN %s AND %s
        """
        params: list[object] = [days.start, days.end]
        if staff_id is not None:
            sql += " AND staff_id=%s"
            params.append(int(staff_id))
        sql += " ORDER BY fine_date ASC, fine_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                Fine(
                    fine_id=int(r["fine_id"]),
                    staff_id=int(r["staff_id"]),
                    fine_date=normalize_mysql_date(r["fine_date"]),
                    amount=normalize_decimal(r.get("amount")),
                    reason=r.get("reason"),
                    approved=bool(r.get("approved") or 0),
                )
                for r in fetchall(cur)
            ]
