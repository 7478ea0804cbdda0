from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..auth.guards import require_elevated
from ..auth.model import Identity
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_ADMIN_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from .model import AttendanceRecord, worked_minutes
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, *, clock: Callable[[], datetime] = now_local):
        self._attendance = attendance
        self._clock = clock

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def check_in(self, identity: Identity, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(identity.employee_id, today)
        if existing and existing.check_in is not None:
            raise ValidationError("Already checked in today")

        if existing:
            # Day row created without a check-in (admin pre-mark); fill it in place.
            if not self._attendance.set_checkin(
                existing.attendance_id,
                check_in=now,
                status=AttendanceStatus.PRESENT,
                updated_by=identity.account_id,
            ):
                raise ValidationError("Already checked in today")
            return self._reload(existing.attendance_id)

        try:
            attendance_id = self._attendance.create_checkin(
                account_id=identity.account_id,
                employee_id=identity.employee_id,
                work_date=today,
                check_in=now,
                status=AttendanceStatus.PRESENT,
                created_by=identity.account_id,
            )
        except DuplicateKeyError as exc:
            raise ValidationError("Already checked in today") from exc
        logger.info("Check-in recorded for %s on %s", identity.employee_id, today)
        return self._reload(attendance_id)

    def check_out(self, identity: Identity, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        record = self._attendance.get_for_employee_and_date(identity.employee_id, today)
        if not record or record.check_in is None:
            raise ValidationError("No check-in found for today")
        if record.check_out is not None:
            raise ValidationError("Already checked out")

        if not self._attendance.set_checkout(
            record.attendance_id,
            check_out=now,
            total_minutes=worked_minutes(record.check_in, now),
            updated_by=identity.account_id,
        ):
            raise ValidationError("Already checked out")
        return self._reload(record.attendance_id)

    def list_mine(
        self,
        identity: Identity,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_range(
            employee_id=identity.employee_id,
            start_date=start_date,
            end_date=end_date,
            limit=DEFAULT_HISTORY_LIMIT,
        )

    def list_all(
        self,
        identity: Identity,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        require_elevated(identity)
        return self._attendance.list_for_range(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            limit=DEFAULT_ADMIN_LIMIT,
        )

    def admin_update(
        self,
        identity: Identity,
        attendance_id: int,
        *,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        require_elevated(identity)
        self._reload(attendance_id)
        self._attendance.admin_update(attendance_id, status=status, notes=notes, updated_by=identity.account_id)
        logger.info("Attendance %s updated by account %s", attendance_id, identity.account_id)
        return self._reload(attendance_id)
