from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.hrms.hrms.attendance.model import worked_minutes
from src.hrms.hrms.core.enums import AttendanceStatus
from src.hrms.hrms.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def attendance(world):
    return world.container.attendance_service


def test_check_in_then_out_counts_minutes(attendance, employee, clock):
    record = attendance.check_in(employee)
    assert record.check_in == clock.now
    assert record.status == AttendanceStatus.PRESENT

    clock.now += timedelta(hours=8, minutes=30, seconds=59)
    record = attendance.check_out(employee)
    assert record.total_minutes == 510


def test_second_check_in_same_day_is_rejected(attendance, employee, clock):
    attendance.check_in(employee)
    clock.now += timedelta(hours=1)
    with pytest.raises(ValidationError, match="Already checked in today"):
        attendance.check_in(employee)


def test_check_out_rules(attendance, employee, clock):
    with pytest.raises(ValidationError, match="No check-in found for today"):
        attendance.check_out(employee)

    attendance.check_in(employee)
    attendance.check_out(employee)
    with pytest.raises(ValidationError, match="Already checked out"):
        attendance.check_out(employee)


def test_next_day_starts_fresh(attendance, employee, clock):
    attendance.check_in(employee)
    clock.now += timedelta(days=1)
    attendance.check_in(employee)
    assert len(attendance.list_mine(employee)) == 2


def test_pre_marked_day_is_filled_in_place(world, attendance, employee, clock):
    attendance_id = world.attendance.add_day(
        account_id=employee.account_id,
        employee_id=employee.employee_id,
        work_date=clock.now.date(),
        status=AttendanceStatus.ABSENT,
    )

    record = attendance.check_in(employee)

    assert record.attendance_id == attendance_id
    assert record.status == AttendanceStatus.PRESENT


def test_worked_minutes_never_negative():
    start = datetime(2024, 3, 15, 9, 0)
    assert worked_minutes(start, start - timedelta(minutes=5)) == 0
    assert worked_minutes(start, start + timedelta(minutes=90)) == 90


def test_admin_listing_and_update(attendance, hr, employee, clock):
    record = attendance.check_in(employee)

    rows = attendance.list_all(hr, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    assert [r.attendance_id for r in rows] == [record.attendance_id]
    assert attendance.list_all(hr, start_date=date(2024, 4, 1)) == []

    updated = attendance.admin_update(hr, record.attendance_id, status=AttendanceStatus.HALF_DAY, notes="left early")
    assert updated.status == AttendanceStatus.HALF_DAY
    assert updated.notes == "left early"
    assert updated.updated_by == hr.account_id

    with pytest.raises(NotFoundError):
        attendance.admin_update(hr, 999, notes="x")
    with pytest.raises(AuthorizationError):
        attendance.list_all(employee)
