from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.hrms.hrms.core.enums import LeaveStatus, LeaveType
from src.hrms.hrms.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hrms.hrms.reports.service import attendance_stats, leave_stats, payroll_stats


@pytest.fixture
def reports(world):
    return world.container.report_service


def test_attendance_report_stats(world, reports, hr, employee, clock):
    service = world.container.attendance_service
    service.check_in(employee)
    clock.now += timedelta(hours=7, minutes=30)
    service.check_out(employee)

    data = reports.attendance_report(hr, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))

    assert data.stats["total_days"] == 1
    assert data.stats["present"] == 1
    assert data.stats["total_hours"] == 7.5
    assert data.rows[0]["employee_id"] == "EMP0001"
    assert "attendance_id" in data.columns


def test_leave_report_filters_and_names(world, reports, hr, employee):
    leaves = world.container.leave_service
    leaves.apply(employee, leave_type=LeaveType.SICK, start_date=datetime(2024, 3, 18), end_date=datetime(2024, 3, 19))
    casual = leaves.apply(
        employee, leave_type=LeaveType.CASUAL, start_date=datetime(2024, 5, 6), end_date=datetime(2024, 5, 6)
    )
    leaves.decide(hr, casual.leave_id, status=LeaveStatus.APPROVED)

    everything = reports.leave_report(hr)
    assert everything.stats["total_requests"] == 2
    assert everything.stats["approved"] == 1
    assert everything.stats["total_days"] == 3
    assert everything.stats["by_type"] == {"sick": 1, "casual": 1}
    assert {r["employee_name"] for r in everything.rows} == {"Evan Cole"}

    march = reports.leave_report(hr, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    assert [r["leave_type"] for r in march.rows] == ["sick"]


def test_leave_report_date_window_applies_before_row_limit(monkeypatch, world, reports, hr, employee):
    monkeypatch.setattr("src.hrms.hrms.reports.service.DEFAULT_ADMIN_LIMIT", 1)
    leaves = world.container.leave_service
    leaves.apply(employee, leave_type=LeaveType.SICK, start_date=datetime(2024, 1, 8), end_date=datetime(2024, 1, 9))
    leaves.apply(employee, leave_type=LeaveType.CASUAL, start_date=datetime(2024, 6, 3), end_date=datetime(2024, 6, 3))

    january = reports.leave_report(hr, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

    assert [r["leave_type"] for r in january.rows] == ["sick"]


def test_payroll_report_totals(world, reports, admin, hr, employee):
    world.container.payroll_service.generate(admin, month=3, year=2024)

    data = reports.payroll_report(hr, month=3, year=2024)

    assert data.stats["total_records"] == 3
    assert data.stats["total_net_pay"] == 90000.0
    assert all(r["employee_name"] != "Unknown" for r in data.rows)


def test_employee_report(reports, hr, employee):
    data = reports.employee_report(hr)
    assert data.stats["total_employees"] == 2
    assert data.stats["by_role"] == {"hr": 1, "employee": 1}
    assert data.stats["by_department"] == {"Engineering": 2}


def test_employee_summary(world, reports, hr, employee):
    world.container.attendance_service.check_in(employee)

    summary = reports.employee_summary(hr, "EMP0001")

    assert summary["employee"]["employee_id"] == "EMP0001"
    assert summary["attendance_stats"]["total_days"] == 1
    assert summary["leave_stats"] == {"total_requests": 0, "pending": 0, "approved": 0, "rejected": 0}

    with pytest.raises(ValidationError, match="Employee ID is required"):
        reports.employee_summary(hr, None)
    with pytest.raises(NotFoundError):
        reports.employee_summary(hr, "NOPE")


def test_reports_are_elevated_only(reports, employee):
    with pytest.raises(AuthorizationError):
        reports.employee_report(employee)


def test_stat_helpers_on_empty_input():
    assert attendance_stats([])["total_hours"] == 0
    assert leave_stats([])["by_type"] == {}
    assert payroll_stats([])["total_net_pay"] == 0
