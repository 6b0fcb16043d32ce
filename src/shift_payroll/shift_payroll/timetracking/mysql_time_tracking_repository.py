from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..common.cache import ListCache
from ..core.enums import TrackingStatus
from ..core.exceptions import StoreError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_date,
    optional_int,
)
from .model import TimeTrackingRecord
from .repository import TimeTrackingRepository

_COLUMNS = """
    record_id, staff_id, work_date, actual_start, actual_end, status, late_minutes,
    early_leave_minutes, overtime_minutes, work_duration, notes, shift_id, in_zone, is_manual_entry
"""


def _status(value) -> Optional[TrackingStatus]:
    if not value:
        return None
    try:
        return TrackingStatus(value)
    except ValueError:
        return None


def _row_to_record(r: dict) -> TimeTrackingRecord:
    in_zone = r.get("in_zone")
    return TimeTrackingRecord(
        record_id=int(r["record_id"]),
        staff_id=int(r["staff_id"]),
        work_date=normalize_mysql_date(r["work_date"]),
        actual_start=r.get("actual_start"),
        actual_end=r.get("actual_end"),
        status=_status(r.get("status")),
        late_minutes=optional_int(r.get("late_minutes")),
        early_leave_minutes=optional_int(r.get("early_leave_minutes")),
        overtime_minutes=optional_int(r.get("overtime_minutes")),
        work_duration=optional_int(r.get("work_duration")),
        notes=r.get("notes"),
        shift_id=optional_int(r.get("shift_id")),
        in_zone=None if in_zone is None else bool(in_zone),
        is_manual_entry=bool(r.get("is_manual_entry") or 0),
    )


def _params(record: TimeTrackingRecord) -> tuple:
    return (
        record.actual_start,
        record.actual_end,
        record.status.value if record.status else None,
        record.late_minutes,
        record.early_leave_minutes,
        record.overtime_minutes,
        record.work_duration,
        record.notes,
        record.shift_id,
        None if record.in_zone is None else int(record.in_zone),
        int(record.is_manual_entry),
    )


class MySQLTimeTrackingRepository(TimeTrackingRepository):
    NAMESPACE = "time_tracking"

    def __init__(self, conn_factory: DatabaseConnection, cache: Optional[ListCache] = None):
        self._conn_factory = conn_factory
        self._cache = cache or ListCache(ttl_seconds=0)

    def create(self, record: TimeTrackingRecord) -> TimeTrackingRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO time_tracking_records(
                        staff_id, work_date, actual_start, actual_end, status, late_minutes,
                        early_leave_minutes, overtime_minutes, work_duration, notes, shift_id,
                        in_zone, is_manual_entry)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (record.staff_id, record.work_date) + _params(record),
                )
                return replace(record, record_id=int(cur.lastrowid))
        except mysql.connector.IntegrityError as e:
            # uq_time_tracking_staff_day: one record per staff member and day
            if is_duplicate_key(e):
                raise ValidationError("Already checked in today") from e
            raise StoreError(f"Time tracking insert rejected: {e}") from e
        finally:
            self._cache.invalidate(self.NAMESPACE)

    def get_by_id(self, record_id: int) -> Optional[TimeTrackingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_tracking_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[TimeTrackingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_tracking_records
                WHERE staff_id=%s AND work_date=%s
                ORDER BY record_id DESC
                LIMIT 1
                """,
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> Sequence[TimeTrackingRecord]:
        return self._cache.get_or_load(
            self.NAMESPACE, (start, end, staff_id), lambda: self._load_range(start=start, end=end, staff_id=staff_id)
        )

    def _load_range(self, *, start: date, end: date, staff_id: Optional[int]) -> list[TimeTrackingRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_tracking_records WHERE {where} ORDER BY work_date ASC, record_id ASC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def update(self, record: TimeTrackingRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE time_tracking_records
                    SET actual_start=%s, actual_end=%s, status=%s, late_minutes=%s,
                        early_leave_minutes=%s, overtime_minutes=%s, work_duration=%s, notes=%s,
                        shift_id=%s, in_zone=%s, is_manual_entry=%s
                    WHERE record_id=%s
                    """,
                    _params(record) + (int(record.record_id),),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            raise StoreError(f"Time tracking update rejected: {e}") from e
        finally:
            self._cache.invalidate(self.NAMESPACE)
