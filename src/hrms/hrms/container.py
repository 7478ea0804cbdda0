from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .auth.decorators import AuthDecorators, auth_decorators
from .auth.middleware import Authenticator
from .auth.mysql_account_repository import MySQLAccountRepository
from .auth.repository import AccountRepository
from .auth.service import AuthService
from .auth.tokens import TokenService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveBalanceService, LeaveService
from .mail.mailer import Mailer
from .notifications.mysql_notification_repository import MySQLNotificationRepository, MySQLOutboxRepository
from .notifications.publisher import Publisher
from .notifications.repository import NotificationRepository, OutboxRepository
from .notifications.service import NotificationService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import ProfileService
from .reports.service import ReportService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    accounts_repo: AccountRepository
    profiles_repo: ProfileRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    payroll_repo: PayrollRepository
    notifications_repo: NotificationRepository
    outbox_repo: OutboxRepository
    audit_repo: AuditRepository

    tokens: TokenService
    authenticator: Authenticator
    guards: AuthDecorators

    auth_service: AuthService
    profile_service: ProfileService
    attendance_service: AttendanceService
    leave_balance_service: LeaveBalanceService
    leave_service: LeaveService
    payroll_service: PayrollService
    notification_service: NotificationService
    report_service: ReportService


def assemble(
    *,
    accounts: AccountRepository,
    profiles: ProfileRepository,
    attendance: AttendanceRepository,
    leaves: LeaveRepository,
    payroll: PayrollRepository,
    notifications: NotificationRepository,
    outbox: OutboxRepository,
    audit: AuditRepository,
    tokens: TokenService,
    mailer: Mailer,
    publisher: Publisher,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over the given repositories (MySQL in production, fakes in tests)."""

    authenticator = Authenticator(tokens, accounts)
    notification_service = NotificationService(notifications, outbox, publisher, clock=clock)
    leave_balance_service = LeaveBalanceService(profiles, leaves, clock=clock)

    return Container(
        conn=conn,
        accounts_repo=accounts,
        profiles_repo=profiles,
        attendance_repo=attendance,
        leaves_repo=leaves,
        payroll_repo=payroll,
        notifications_repo=notifications,
        outbox_repo=outbox,
        audit_repo=audit,
        tokens=tokens,
        authenticator=authenticator,
        guards=auth_decorators(authenticator),
        auth_service=AuthService(accounts, profiles, tokens, mailer, clock=clock),
        profile_service=ProfileService(profiles, accounts, audit, clock=clock),
        attendance_service=AttendanceService(attendance, clock=clock),
        leave_balance_service=leave_balance_service,
        leave_service=LeaveService(
            leaves,
            profiles,
            accounts,
            leave_balance_service,
            notification_service,
            mailer,
            clock=clock,
        ),
        payroll_service=PayrollService(payroll, accounts, profiles),
        notification_service=notification_service,
        report_service=ReportService(attendance, leaves, payroll, profiles, accounts, clock=clock),
    )


def build_container(*, db_config: dict, tokens: TokenService, mailer: Mailer, publisher: Publisher) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(db_config.get("pool_size", 5)),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        accounts=MySQLAccountRepository(conn),
        profiles=MySQLProfileRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        payroll=MySQLPayrollRepository(conn),
        notifications=MySQLNotificationRepository(conn),
        outbox=MySQLOutboxRepository(conn),
        audit=MySQLAuditRepository(conn),
        tokens=tokens,
        mailer=mailer,
        publisher=publisher,
        conn=conn,
    )
