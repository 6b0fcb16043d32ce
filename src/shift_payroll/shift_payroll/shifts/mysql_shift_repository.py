from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

import mysql.connector

from ..common.cache import ListCache
from ..core.enums import ShiftStatus
from ..core.exceptions import DuplicateShiftError, StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_date,
    normalize_mysql_time,
    optional_int,
)
from .model import NewShift, Shift
from .repository import ShiftRepository

_COLUMNS = "shift_id, staff_id, work_date, start_time, end_time, status, break_minutes, alternative_staff_id, notes"


def _row_to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        staff_id=int(r["staff_id"]),
        work_date=normalize_mysql_date(r["work_date"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        status=ShiftStatus(r["status"]),
        break_minutes=int(r.get("break_minutes") or 0),
        alternative_staff_id=optional_int(r.get("alternative_staff_id")),
        notes=r.get("notes"),
    )


class MySQLShiftRepository(ShiftRepository):
    NAMESPACE = "shifts"

    def __init__(self, conn_factory: DatabaseConnection, cache: Optional[ListCache] = None):
        self._conn_factory = conn_factory
        self._cache = cache or ListCache(ttl_seconds=0)

    def create(self, new: NewShift) -> Shift:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO staff_shifts(staff_id, work_date, start_time, end_time, status,
                                             break_minutes, alternative_staff_id, notes)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        new.staff_id,
                        new.work_date,
                        new.start_time,
                        new.end_time,
                        ShiftStatus.SCHEDULED.value,
                        int(new.break_minutes),
                        new.alternative_staff_id,
                        new.notes,
                    ),
                )
                shift_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateShiftError(new.staff_id, new.work_date) from e
            raise StoreError(f"Shift insert rejected: {e}") from e
        finally:
            self._cache.invalidate(self.NAMESPACE)

        return Shift(
            shift_id=shift_id,
            staff_id=new.staff_id,
            work_date=new.work_date,
            start_time=new.start_time,
            end_time=new.end_time,
            status=ShiftStatus.SCHEDULED,
            break_minutes=int(new.break_minutes),
            alternative_staff_id=new.alternative_staff_id,
            notes=new.notes,
        )

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff_shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def find_active(self, *, staff_id: int, work_date: date) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_shifts
                WHERE staff_id=%s AND work_date=%s AND status<>%s
                LIMIT 1
                """,
                (int(staff_id), work_date, ShiftStatus.CANCELLED.value),
            )
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def list_range(
        self,
        *,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        status: Optional[ShiftStatus] = None,
    ) -> Sequence[Shift]:
        key = (start, end, staff_id, status.value if status else None)
        return self._cache.get_or_load(
            self.NAMESPACE, key, lambda: self._load_range(start=start, end=end, staff_id=staff_id, status=status)
        )

    def _load_range(self, *, start: date, end: date, staff_id: Optional[int], status: Optional[ShiftStatus]) -> list[Shift]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM staff_shifts WHERE {where} ORDER BY work_date ASC, staff_id ASC, shift_id ASC",
                tuple(params),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def list_scheduled_before(self, day: date) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM staff_shifts WHERE status=%s AND work_date<%s ORDER BY work_date, shift_id",
                (ShiftStatus.SCHEDULED.value, day),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def update_status(self, *, shift_id: int, status: ShiftStatus) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("UPDATE staff_shifts SET status=%s WHERE shift_id=%s", (status.value, int(shift_id)))
                return cur.rowcount > 0
        finally:
            self._cache.invalidate(self.NAMESPACE)

    def update_details(
        self,
        *,
        shift_id: int,
        start_time: time,
        end_time: time,
        break_minutes: int,
        alternative_staff_id: Optional[int],
        notes: Optional[str],
    ) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE staff_shifts
                    SET start_time=%s, end_time=%s, break_minutes=%s, alternative_staff_id=%s, notes=%s
                    WHERE shift_id=%s
                    """,
                    (start_time, end_time, int(break_minutes), alternative_staff_id, notes, int(shift_id)),
                )
                return cur.rowcount > 0
        finally:
            self._cache.invalidate(self.NAMESPACE)
