from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence

from ..auth.guards import require_elevated
from ..auth.model import Identity
from ..auth.repository import AccountRepository
from ..common.datetime_utils import now_local
from ..common.serializers import to_json
from ..core.constants import DEFAULT_ADMIN_LIMIT, DEFAULT_HISTORY_LIMIT, WORKING_DAYS_PER_MONTH
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..mail.mailer import MailDeliveryError, Mailer
from ..notifications.model import LEAVE_REQUEST, LEAVE_UPDATE
from ..notifications.service import NotificationService
from ..profiles.model import Profile
from ..profiles.repository import ProfileRepository
from .balance import LeaveBalance, compute_balance
from .model import LeaveAllowance, LeaveHistoryEntry, LeaveRequest, inclusive_days
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

APPLIED = "applied"

# Allowed decisions per current status; terminal states allow none.
TRANSITIONS: Mapping[LeaveStatus, frozenset] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
}


def can_transition(current: LeaveStatus, target: LeaveStatus) -> bool:
    return target in TRANSITIONS[current]


def leave_to_dict(leave: LeaveRequest, **extra) -> dict:
    data = to_json(leave)
    data["days"] = leave.days
    data.update(extra)
    return data


def sick_leave_deduction(
    *, basic: float, requested_days: int, remaining_sick: float, allowance_sick: float
) -> tuple[float, Optional[str]]:
    """Deduction for sick days beyond the remaining allowance: basic / 30 per unpaid day."""

    unpaid_days = requested_days - int(remaining_sick)
    if unpaid_days <= 0 or basic <= 0:
        return 0.0, None
    amount = float(round(basic / WORKING_DAYS_PER_MONTH * unpaid_days))
    reason = f"{unpaid_days} unpaid sick leave days (exceeded annual limit of {allowance_sick:g} days)"
    return amount, reason


class LeaveBalanceService:
    def __init__(
        self,
        profiles: ProfileRepository,
        leaves: LeaveRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._profiles = profiles
        self._leaves = leaves
        self._clock = clock

    def ensure_allowance(self, profile: Profile) -> LeaveAllowance:
        """Return the stored allowance, persisting the default schedule on first access."""

        if profile.leave_balance is not None:
            return profile.leave_balance
        allowance = LeaveAllowance.default(self._clock().year)
        self._profiles.set_leave_balance(profile.profile_id, allowance)
        logger.info("Initialized default leave allowance for %s", profile.employee_id)
        return allowance

    def balance_for(self, profile: Profile) -> LeaveBalance:
        allowance = self.ensure_allowance(profile)
        year = self._clock().year
        approved = self._leaves.list_approved_in_year(profile.employee_id, year)
        return compute_balance(allowance, approved, year=year)

    def get_balance(self, identity: Identity) -> LeaveBalance:
        profile = self._profiles.get_by_account_id(identity.account_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return self.balance_for(profile)

    def update_allowance(
        self, identity: Identity, employee_id: str, *, leave_type: LeaveType, days: float
    ) -> LeaveAllowance:
        require_elevated(identity)
        profile = self._profiles.get_by_employee_id(employee_id)
        if not profile:
            raise NotFoundError("Employee not found")
        current = profile.leave_balance or LeaveAllowance.default(self._clock().year)
        updated = current.with_days(leave_type, days)
        self._profiles.set_leave_balance(profile.profile_id, updated)
        return updated


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        profiles: ProfileRepository,
        accounts: AccountRepository,
        balances: LeaveBalanceService,
        notifications: NotificationService,
        mailer: Mailer,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._leaves = leaves
        self._profiles = profiles
        self._accounts = accounts
        self._balances = balances
        self._notifications = notifications
        self._mailer = mailer
        self._clock = clock

    def _get(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def _sick_deduction(self, employee_id: str, requested_days: int) -> tuple[float, Optional[str]]:
        profile = self._profiles.get_by_employee_id(employee_id)
        if not profile or not profile.salary_structure or not profile.salary_structure.basic:
            return 0.0, None
        allowance = self._balances.ensure_allowance(profile)
        balance = self._balances.balance_for(replace(profile, leave_balance=allowance))
        return sick_leave_deduction(
            basic=profile.salary_structure.basic,
            requested_days=requested_days,
            remaining_sick=balance.remaining_for(LeaveType.SICK),
            allowance_sick=allowance.for_type(LeaveType.SICK),
        )

    def apply(
        self,
        identity: Identity,
        *,
        leave_type: LeaveType,
        start_date: datetime,
        end_date: datetime,
        remarks: Optional[str] = None,
    ) -> LeaveRequest:
        if end_date < start_date:
            raise ValidationError(
                "Validation failed",
                errors=[{"field": "end_date", "message": "End date must be on or after start date"}],
            )

        deduction, reason = 0.0, None
        if leave_type == LeaveType.SICK:
            requested = math.ceil(inclusive_days(start_date, end_date))
            try:
                deduction, reason = self._sick_deduction(identity.employee_id, requested)
            except Exception:
                # The request is still recorded, without a deduction.
                logger.exception("Sick-leave deduction failed for %s", identity.employee_id)

        now = self._clock()
        leave_id = self._leaves.create(
            account_id=identity.account_id,
            employee_id=identity.employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            remarks=remarks,
            salary_deduction=deduction,
            deduction_reason=reason,
            created_by=identity.account_id,
            applied=LeaveHistoryEntry(action=APPLIED, actor_id=identity.account_id, comment=None, timestamp=now),
        )
        logger.info("Leave %s (%s) applied by %s", leave_id, leave_type.value, identity.employee_id)

        self._notify_reviewers(identity, leave_id=leave_id, leave_type=leave_type)
        return self._get(leave_id)

    def _notify_reviewers(self, identity: Identity, *, leave_id: int, leave_type: LeaveType) -> None:
        for reviewer in self._accounts.list_by_roles((Role.ADMIN, Role.HR)):
            try:
                self._notifications.notify(
                    reviewer.account_id,
                    type=LEAVE_REQUEST,
                    title="New Leave Request",
                    message=f"Employee {identity.employee_id} applied for {leave_type.value} leave",
                    metadata={"leave_id": leave_id},
                )
            except Exception:
                logger.exception("Failed to notify account %s about leave %s", reviewer.account_id, leave_id)

    def list_mine(self, identity: Identity) -> Sequence[LeaveRequest]:
        return self._leaves.list_for_employee(identity.employee_id, limit=DEFAULT_HISTORY_LIMIT)

    def list_all(self, identity: Identity, *, status: Optional[LeaveStatus] = None) -> list[dict]:
        """Admin listing; each row carries the requester's display name."""

        require_elevated(identity)
        names: dict[str, str] = {}
        rows = []
        for leave in self._leaves.list_all(status=status, limit=DEFAULT_ADMIN_LIMIT):
            if leave.employee_id not in names:
                profile = self._profiles.get_by_employee_id(leave.employee_id)
                names[leave.employee_id] = profile.full_name if profile else "Unknown"
            rows.append(leave_to_dict(leave, employee_name=names[leave.employee_id]))
        return rows

    def decide(
        self,
        identity: Identity,
        leave_id: int,
        *,
        status: LeaveStatus,
        comment: Optional[str] = None,
    ) -> LeaveRequest:
        require_elevated(identity)
        leave = self._get(leave_id)
        if not can_transition(leave.status, status):
            raise ValidationError("Leave request already processed")

        entry = LeaveHistoryEntry(action=status.value, actor_id=identity.account_id, comment=comment, timestamp=self._clock())
        if not self._leaves.record_decision(leave_id, expected=leave.status, entry=entry, status=status):
            raise ValidationError("Leave request already processed")
        logger.info("Leave %s %s by account %s", leave_id, status.value, identity.account_id)

        decided = self._get(leave_id)
        self._announce_decision(decided, comment)
        return decided

    def _announce_decision(self, leave: LeaveRequest, comment: Optional[str]) -> None:
        account = self._accounts.get_by_id(leave.account_id)
        if account:
            try:
                self._mailer.send_leave_decision(account.email, leave.status.value, comment)
            except MailDeliveryError as exc:
                logger.warning("Leave decision email for leave %s not sent: %s", leave.leave_id, exc)

        try:
            self._notifications.notify(
                leave.account_id,
                type=LEAVE_UPDATE,
                title=f"Leave Request {leave.status.value.upper()}",
                message=f"Your leave request has been {leave.status.value}",
                metadata={"leave_id": leave.leave_id, "status": leave.status.value},
            )
        except Exception:
            logger.exception("Failed to create leave update notification for leave %s", leave.leave_id)

