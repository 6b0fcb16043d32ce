from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.shift_payroll.shift_payroll.common.cache import ListCache
from src.shift_payroll.shift_payroll.core.exceptions import StoreError, ValidationError
from src.shift_payroll.shift_payroll.timetracking.model import TimeTrackingRecord
from src.shift_payroll.shift_payroll.timetracking.mysql_time_tracking_repository import MySQLTimeTrackingRepository


class FailingCursor:
    def __init__(self, error: Exception):
        self._error = error

    def execute(self, sql, params=None):
        raise self._error

    def close(self):
        pass


class FakeConnection:
    def __init__(self, error: Exception):
        self._error = error
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return FailingCursor(self._error)

    def commit(self):
        pass

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self, error: Exception):
        self.conn = FakeConnection(error)

    def connect(self):
        return self.conn


def _record() -> TimeTrackingRecord:
    return TimeTrackingRecord(record_id=0, staff_id=1, work_date=date(2024, 5, 6), actual_start=datetime(2024, 5, 6, 8, 0))


def test_concurrent_second_check_in_is_a_validation_error():
    factory = FakeConnFactory(mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY))
    repo = MySQLTimeTrackingRepository(factory, ListCache(ttl_seconds=0))

    with pytest.raises(ValidationError, match="Already checked in today"):
        repo.create(_record())
    assert factory.conn.rolled_back


def test_other_integrity_failures_become_store_errors():
    factory = FakeConnFactory(mysql.connector.IntegrityError(msg="FK violation", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    repo = MySQLTimeTrackingRepository(factory, ListCache(ttl_seconds=0))

    with pytest.raises(StoreError):
        repo.create(_record())
    with pytest.raises(StoreError):
        repo.update(TimeTrackingRecord(record_id=5, staff_id=1, work_date=date(2024, 5, 6)))
