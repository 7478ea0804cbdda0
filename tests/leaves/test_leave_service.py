from __future__ import annotations

from datetime import datetime

import pytest

from src.hrms.hrms.core.enums import LeaveStatus, LeaveType, Role
from src.hrms.hrms.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hrms.hrms.leaves.balance import compute_balance
from src.hrms.hrms.leaves.model import LeaveAllowance, LeaveRequest
from src.hrms.hrms.leaves.service import can_transition, sick_leave_deduction
from src.hrms.hrms.notifications.model import LEAVE_REQUEST, LEAVE_UPDATE
from tests.fakes import FakeMailer, World


def _approved(leave_id, employee, leave_type, start, end):
    return LeaveRequest(
        leave_id=leave_id,
        account_id=employee.account_id,
        employee_id=employee.employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        status=LeaveStatus.APPROVED,
    )


@pytest.fixture
def leaves(world):
    return world.container.leave_service


@pytest.fixture
def balances(world):
    return world.container.leave_balance_service


def test_balance_is_floored_at_zero(world, balances, employee):
    world.leaves.add(_approved(100, employee, LeaveType.SICK, datetime(2024, 1, 1), datetime(2024, 1, 5)))
    world.leaves.add(_approved(101, employee, LeaveType.SICK, datetime(2024, 2, 1), datetime(2024, 2, 10)))

    balance = balances.get_balance(employee)

    assert balance.remaining_for(LeaveType.SICK) == 0
    assert balance.remaining_for(LeaveType.CASUAL) == 12
    assert balance.used[LeaveType.SICK] == 15


def test_balance_ignores_other_years_and_pending():
    allowance = LeaveAllowance.default(2024)
    employee_leaves = [
        LeaveRequest(1, 1, "E1", LeaveType.ANNUAL, datetime(2023, 12, 1), datetime(2023, 12, 5), LeaveStatus.APPROVED),
        LeaveRequest(2, 1, "E1", LeaveType.ANNUAL, datetime(2024, 5, 1), datetime(2024, 5, 2), LeaveStatus.PENDING),
        LeaveRequest(3, 1, "E1", LeaveType.ANNUAL, datetime(2024, 6, 3), datetime(2024, 6, 4), LeaveStatus.APPROVED),
    ]

    balance = compute_balance(allowance, employee_leaves, year=2024)

    assert balance.remaining_for(LeaveType.ANNUAL) == 19


def test_partial_days_are_rounded_up_against_the_allowance():
    allowance = LeaveAllowance.default(2024)
    half_day_tail = LeaveRequest(
        1, 1, "E1", LeaveType.SICK, datetime(2024, 1, 1, 0, 0), datetime(2024, 1, 2, 12, 0), LeaveStatus.APPROVED
    )

    balance = compute_balance(allowance, [half_day_tail], year=2024)

    assert balance.used[LeaveType.SICK] == 2.5
    assert balance.remaining_for(LeaveType.SICK) == 9


def test_first_read_persists_default_allowance(world, balances, employee):
    assert world.profiles.get_by_employee_id("EMP0001").leave_balance is None
    balances.get_balance(employee)
    stored = world.profiles.get_by_employee_id("EMP0001").leave_balance
    assert stored.for_type(LeaveType.ANNUAL) == 21
    assert stored.year == 2024


def test_update_allowance_changes_one_type(balances, hr, employee):
    updated = balances.update_allowance(hr, "EMP0001", leave_type=LeaveType.CASUAL, days=20)
    assert updated.for_type(LeaveType.CASUAL) == 20
    assert balances.get_balance(employee).remaining_for(LeaveType.CASUAL) == 20

    with pytest.raises(NotFoundError, match="Employee not found"):
        balances.update_allowance(hr, "NOPE", leave_type=LeaveType.CASUAL, days=1)
    with pytest.raises(AuthorizationError):
        balances.update_allowance(employee, "EMP0001", leave_type=LeaveType.CASUAL, days=99)


def test_state_machine_only_leaves_pending():
    assert can_transition(LeaveStatus.PENDING, LeaveStatus.APPROVED)
    assert can_transition(LeaveStatus.PENDING, LeaveStatus.REJECTED)
    for terminal in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
        for target in LeaveStatus:
            assert not can_transition(terminal, target)


def test_sick_deduction_formula():
    amount, reason = sick_leave_deduction(basic=30000, requested_days=10, remaining_sick=7, allowance_sick=12)
    assert amount == 3000
    assert reason == "3 unpaid sick leave days (exceeded annual limit of 12 days)"

    assert sick_leave_deduction(basic=30000, requested_days=7, remaining_sick=7, allowance_sick=12) == (0.0, None)


def test_apply_sick_leave_beyond_balance_records_deduction(world, leaves, employee):
    world.leaves.add(_approved(100, employee, LeaveType.SICK, datetime(2024, 1, 1), datetime(2024, 1, 5)))

    leave = leaves.apply(
        employee,
        leave_type=LeaveType.SICK,
        start_date=datetime(2024, 3, 18),
        end_date=datetime(2024, 3, 27),
    )

    assert leave.status == LeaveStatus.PENDING
    assert leave.days == 10
    assert leave.salary_deduction == 3000
    assert "3 unpaid sick leave days" in leave.deduction_reason
    assert [h.action for h in leave.history] == ["applied"]


def test_apply_sick_leave_without_deduction_when_balance_lookup_fails(monkeypatch, world, leaves, employee):
    def unavailable(profile_id, allowance):
        raise ConnectionError("database unavailable")

    monkeypatch.setattr(world.profiles, "set_leave_balance", unavailable)

    leave = leaves.apply(
        employee, leave_type=LeaveType.SICK, start_date=datetime(2024, 3, 18), end_date=datetime(2024, 3, 19)
    )

    assert leave.status == LeaveStatus.PENDING
    assert leave.salary_deduction == 0
    assert leave.deduction_reason is None


def test_apply_rejects_reversed_range(leaves, employee):
    with pytest.raises(ValidationError) as exc:
        leaves.apply(
            employee,
            leave_type=LeaveType.CASUAL,
            start_date=datetime(2024, 3, 20),
            end_date=datetime(2024, 3, 19),
        )
    assert exc.value.errors[0]["field"] == "end_date"


def test_apply_notifies_every_reviewer(world, leaves, admin, hr, employee):
    leave = leaves.apply(
        employee, leave_type=LeaveType.CASUAL, start_date=datetime(2024, 3, 20), end_date=datetime(2024, 3, 20)
    )

    notified = {account_id for account_id, _ in world.publisher.published}
    assert notified == {admin.account_id, hr.account_id}
    payload = world.publisher.published[0][1]
    assert payload["type"] == LEAVE_REQUEST
    assert payload["metadata"] == {"leave_id": leave.leave_id}


def test_decision_is_final_and_announced(world, leaves, hr, employee):
    leave = leaves.apply(
        employee, leave_type=LeaveType.ANNUAL, start_date=datetime(2024, 4, 1), end_date=datetime(2024, 4, 3)
    )
    world.publisher.published.clear()

    decided = leaves.decide(hr, leave.leave_id, status=LeaveStatus.APPROVED, comment="Enjoy")

    assert decided.status == LeaveStatus.APPROVED
    assert decided.approver_id == hr.account_id
    assert [h.action for h in decided.history] == ["applied", "approved"]
    assert world.mailer.last("leave_decision") == ("leave_decision", "emp0001@example.com", "approved", "Enjoy")
    assert world.publisher.published == [
        (employee.account_id, world.notifications.get(max(world.notifications.rows)).to_dict())
    ]
    assert world.publisher.published[0][1]["type"] == LEAVE_UPDATE

    with pytest.raises(ValidationError, match="Leave request already processed"):
        leaves.decide(hr, leave.leave_id, status=LeaveStatus.REJECTED)


def test_decision_survives_mail_failure(tokens, clock):
    world = World(tokens=tokens, clock=clock, mailer=FakeMailer(fail=True))
    hr = world.hire("HR001", role=Role.HR)
    employee = world.hire("EMP0001")
    service = world.container.leave_service
    leave = service.apply(
        employee, leave_type=LeaveType.CASUAL, start_date=datetime(2024, 4, 1), end_date=datetime(2024, 4, 1)
    )

    decided = service.decide(hr, leave.leave_id, status=LeaveStatus.REJECTED, comment="Busy week")

    assert decided.status == LeaveStatus.REJECTED
    assert decided.admin_remarks == "Busy week"


def test_decide_requires_elevated_role_and_existing_leave(leaves, hr, employee):
    with pytest.raises(NotFoundError, match="Leave request not found"):
        leaves.decide(hr, 404, status=LeaveStatus.APPROVED)
    leave = leaves.apply(
        employee, leave_type=LeaveType.CASUAL, start_date=datetime(2024, 4, 1), end_date=datetime(2024, 4, 1)
    )
    with pytest.raises(AuthorizationError):
        leaves.decide(employee, leave.leave_id, status=LeaveStatus.APPROVED)


def test_admin_listing_carries_names(leaves, hr, employee):
    leaves.apply(employee, leave_type=LeaveType.CASUAL, start_date=datetime(2024, 4, 1), end_date=datetime(2024, 4, 2))

    rows = leaves.list_all(hr, status=LeaveStatus.PENDING)

    assert rows[0]["employee_name"] == "Evan Cole"
    assert rows[0]["days"] == 2
    assert leaves.list_all(hr, status=LeaveStatus.APPROVED) == []
