from __future__ import annotations

from typing import Optional, Sequence

from ..common.cache import ListCache
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffMember
from .repository import StaffRepository

_COLUMNS = """
    staff_id, full_name, role, salary_type, salary, shift_rate, penalty_type, penalty_amount,
    absence_penalty, punctuality_bonus, overtime_rate, is_active
"""


def _row_to_staff(r: dict) -> StaffMember:
    return StaffMember(
        staff_id=int(r["staff_id"]),
        full_name=r["full_name"],
        role=r.get("role"),
        salary_type=r.get("salary_type"),
        salary=r.get("salary"),
        shift_rate=r.get("shift_rate"),
        penalty_type=r.get("penalty_type"),
        penalty_amount=r.get("penalty_amount"),
        absence_penalty=r.get("absence_penalty"),
        punctuality_bonus=r.get("punctuality_bonus"),
        overtime_rate=r.get("overtime_rate"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLStaffRepository(StaffRepository):
    NAMESPACE = "staff"

    def __init__(self, conn_factory: DatabaseConnection, cache: Optional[ListCache] = None):
        self._conn_factory = conn_factory
        self._cache = cache or ListCache(ttl_seconds=0)

    def get_by_id(self, staff_id: int) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE staff_id=%s", (int(staff_id),))
            r = fetchone(cur)
            return _row_to_staff(r) if r else None

    def list_active(self) -> Sequence[StaffMember]:
        return self._cache.get_or_load(self.NAMESPACE, "active", self._load_active)

    def _load_active(self) -> list[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE is_active=1 ORDER BY full_name, staff_id")
            return [_row_to_staff(r) for r in fetchall(cur)]
