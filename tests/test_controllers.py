from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest
from flask import Flask

from src.shift_payroll.shift_payroll.main import register_routes
from src.shift_payroll.shift_payroll.shifts.model import Shift
from tests.fakes import InMemoryShifts, build_test_container, make_staff


@pytest.fixture()
def shifts():
    return InMemoryShifts(
        [Shift(shift_id=1, staff_id=1, work_date=date(2024, 5, 6), start_time=time(8, 0), end_time=time(17, 0))]
    )


@pytest.fixture()
def client(shifts):
    app = Flask(__name__)
    container = build_test_container(
        make_staff(1, full_name="Anna"),
        make_staff(2, full_name="Olga", salary=Decimal("12000")),
        shifts_repo=shifts,
    )
    register_routes(app, container)
    return app.test_client()


def test_create_shift_and_duplicate_conflict(client):
    body = {"staff_id": 2, "date": "2024-05-07", "start_time": "09:00", "end_time": "18:00"}

    res = client.post("/api/shifts", json=body)
    assert res.status_code == 201
    assert res.get_json()["shift"]["status"] == "scheduled"

    res = client.post("/api/shifts", json=body)
    assert res.status_code == 409
    assert res.get_json()["success"] is False


def test_create_shift_validation_error(client):
    res = client.post("/api/shifts", json={"staff_id": 2, "date": "2024-05-07", "start_time": "18:00", "end_time": "09:00"})
    assert res.status_code == 400


def test_create_shift_unknown_staff(client):
    res = client.post("/api/shifts", json={"staff_id": 99, "date": "2024-05-07", "start_time": "09:00", "end_time": "18:00"})
    assert res.status_code == 404


def test_bulk_generation_reports_counts(client, shifts):
    res = client.post("/api/shifts/bulk", json={"staff_ids": [1, 2], "start": "2099-01-05", "end": "2099-01-09"})

    assert res.status_code == 200
    data = res.get_json()
    assert data["created"] == 10
    assert data["failed"] == 0
    assert len(shifts.all()) == 11


def test_bulk_generation_requires_staff_ids(client):
    res = client.post("/api/shifts/bulk", json={"staff_ids": [], "end": "2099-01-09"})
    assert res.status_code == 400


def test_cancel_then_cancel_again_is_rejected(client):
    assert client.post("/api/shifts/1/cancel").status_code == 200
    assert client.post("/api/shifts/1/cancel").status_code == 400


def test_clock_in_out_of_zone_still_succeeds(client):
    res = client.post("/api/time-tracking/clock-in", json={"staff_id": 2, "latitude": 59.93, "longitude": 30.33})

    assert res.status_code == 200
    data = res.get_json()
    assert data["geofence"]["in_zone"] is False
    assert data["record"]["in_zone"] is False


def test_attendance_lists_reconciled_records(client):
    res = client.get("/api/attendance?start=2024-05-06&end=2024-05-06")

    assert res.status_code == 200
    records = res.get_json()["records"]
    assert [r["id"] for r in records] == ["shift-1"]


def test_payroll_list_is_virtual_until_saved(client):
    res = client.get("/api/payroll?period=2024-05")
    assert res.status_code == 200
    payrolls = res.get_json()["payrolls"]
    assert {p["staff_id"] for p in payrolls} == {1, 2}
    assert all(p["virtual"] and p["id"] is None for p in payrolls)

    saved = client.post("/api/payroll/save", json={"staff_id": 2, "period": "2024-05"})
    assert saved.status_code == 201
    payroll_id = saved.get_json()["payroll"]["id"]

    assert client.post(f"/api/payroll/{payroll_id}/mark-paid").status_code == 400
    assert client.post(f"/api/payroll/{payroll_id}/approve").status_code == 200
    assert client.post("/api/payroll/999/approve").status_code == 404


def test_payroll_bad_period(client):
    assert client.get("/api/payroll?period=2024-13").status_code == 400


def test_attendance_csv_export(client):
    res = client.get("/api/reports/attendance.csv?start=2024-05-06&end=2024-05-06")

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    text = res.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("work_date,staff_id,full_name")
    assert "Anna" in text


def test_payroll_csv_export(client):
    res = client.get("/api/reports/payroll.csv?period=2024-05")

    assert res.status_code == 200
    assert "payroll_2024-05.csv" in res.headers["Content-Disposition"]
    assert "12000.00" in res.data.decode("utf-8-sig")


def test_patch_shift_clears_substitute_only_when_sent(client, shifts):
    res = client.patch("/api/shifts/1", json={"alternative_staff_id": 2})
    assert res.get_json()["shift"]["alternative_staff_id"] == 2

    res = client.patch("/api/shifts/1", json={"notes": "garden duty"})
    assert res.get_json()["shift"]["alternative_staff_id"] == 2

    res = client.patch("/api/shifts/1", json={"alternative_staff_id": None})
    assert res.status_code == 200
    assert shifts.get_by_id(1).alternative_staff_id is None
