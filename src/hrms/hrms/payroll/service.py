from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..auth.guards import require_admin, require_elevated
from ..auth.model import Identity
from ..auth.repository import AccountRepository
from ..core.constants import DEFAULT_ADMIN_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from ..profiles.repository import ProfileRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayComponents, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        accounts: AccountRepository,
        profiles: ProfileRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._accounts = accounts
        self._profiles = profiles
        self._calculator = calculator or StandardPayrollCalculator()

    def _get(self, payroll_id: int) -> PayrollRecord:
        record = self._payroll.get(payroll_id)
        if not record:
            raise NotFoundError("Payroll not found")
        return record

    def list_mine(
        self, identity: Identity, *, month: Optional[int] = None, year: Optional[int] = None
    ) -> Sequence[PayrollRecord]:
        return self._payroll.search(
            employee_id=identity.employee_id, month=month, year=year, limit=DEFAULT_HISTORY_LIMIT
        )

    def list_all(
        self,
        identity: Identity,
        *,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[PayrollRecord]:
        require_elevated(identity)
        return self._payroll.search(employee_id=employee_id, month=month, year=year, limit=DEFAULT_ADMIN_LIMIT)

    def create(self, identity: Identity, *, employee_id: str, month: int, year: int, pay: PayComponents) -> PayrollRecord:
        require_elevated(identity)
        account = self._accounts.get_by_employee_id(employee_id)
        if not account:
            raise NotFoundError("Employee not found")
        if self._payroll.get_for_period(employee_id, month, year):
            raise ValidationError("Payroll already exists for this month and year")

        try:
            payroll_id = self._payroll.create(
                account_id=account.account_id,
                employee_id=employee_id,
                month=month,
                year=year,
                pay=pay,
                net_pay=self._calculator.net_pay(pay),
                updated_by=identity.account_id,
            )
        except DuplicateKeyError as exc:
            raise ValidationError("Payroll already exists for this month and year") from exc
        return self._get(payroll_id)

    def update(
        self,
        identity: Identity,
        payroll_id: int,
        *,
        basic: Optional[float] = None,
        hra: Optional[float] = None,
        allowances: Optional[float] = None,
        deductions: Optional[float] = None,
    ) -> PayrollRecord:
        """Overwrite the given components; net pay is recomputed every time."""

        require_elevated(identity)
        record = self._get(payroll_id)
        changes = {
            k: float(v)
            for k, v in (("basic", basic), ("hra", hra), ("allowances", allowances), ("deductions", deductions))
            if v is not None
        }
        pay = replace(record.components, **changes)
        self._payroll.update(payroll_id, pay=pay, net_pay=self._calculator.net_pay(pay), updated_by=identity.account_id)
        return self._get(payroll_id)

    def generate(self, identity: Identity, *, month: int, year: int) -> dict:
        """Create the period's record for every profile with a salary structure.

        Existing records are left untouched, so running twice is harmless.
        """

        require_admin(identity)
        generated = existing = skipped = 0
        for profile in self._profiles.list_all():
            salary = profile.salary_structure
            if salary is None:
                skipped += 1
                continue
            if self._payroll.get_for_period(profile.employee_id, month, year):
                existing += 1
                continue

            pay = PayComponents(
                basic=salary.basic, hra=salary.hra, allowances=salary.allowances, deductions=salary.deductions
            )
            try:
                self._payroll.create(
                    account_id=profile.account_id,
                    employee_id=profile.employee_id,
                    month=month,
                    year=year,
                    pay=pay,
                    net_pay=self._calculator.net_pay(pay),
                    updated_by=identity.account_id,
                )
            except DuplicateKeyError:
                existing += 1
                continue
            generated += 1

        logger.info(
            "Payroll %02d/%d generated=%d existing=%d skipped=%d", month, year, generated, existing, skipped
        )
        return {"generated": generated, "existing": existing, "skipped": skipped}
