from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import PayComponents


class PayrollCalculator(ABC):
    """Derives pay totals from stored components; swap in a subclass for other pay rules."""

    @abstractmethod
    def gross_pay(self, pay: PayComponents) -> float:
        raise NotImplementedError

    def net_pay(self, pay: PayComponents) -> float:
        return round(self.gross_pay(pay) - float(pay.deductions), 2)
