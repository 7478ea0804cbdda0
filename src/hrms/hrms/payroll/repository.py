from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayComponents, PayrollRecord


class PayrollRepository(Protocol):
    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_for_period(self, employee_id: str, month: int, year: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        account_id: int,
        employee_id: str,
        month: int,
        year: int,
        pay: PayComponents,
        net_pay: float,
        updated_by: int,
    ) -> int:
        raise NotImplementedError

    def update(self, payroll_id: int, *, pay: PayComponents, net_pay: float, updated_by: int) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: int,
    ) -> Sequence[PayrollRecord]:
        """Newest period first; every filter is optional."""

        raise NotImplementedError
