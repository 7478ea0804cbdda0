from __future__ import annotations

from ..model import PayComponents
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """basic + hra + allowances, less deductions."""

    def gross_pay(self, pay: PayComponents) -> float:
        return round(float(pay.basic) + float(pay.hra) + float(pay.allowances), 2)
