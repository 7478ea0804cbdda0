from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PayComponents:
    basic: float
    hra: float = 0.0
    allowances: float = 0.0
    deductions: float = 0.0


@dataclass(frozen=True)
class PayrollRecord:
    """Pay for one employee and (month, year); ``net_pay`` is always derived."""

    payroll_id: int
    account_id: int
    employee_id: str
    month: int
    year: int
    basic: float
    hra: float
    allowances: float
    deductions: float
    net_pay: float
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def components(self) -> PayComponents:
        return PayComponents(basic=self.basic, hra=self.hra, allowances=self.allowances, deductions=self.deductions)
