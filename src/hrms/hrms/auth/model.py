from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Login identity with its secret-bearing fields.

    Never serialize this directly; use ``public_view``.
    """

    account_id: int
    employee_id: str
    email: str
    password_hash: str
    role: Role
    is_verified: bool = False
    verification_token: Optional[str] = None
    reset_token: Optional[str] = None
    reset_token_expires: Optional[datetime] = None
    reset_otp: Optional[str] = None
    reset_otp_expires: Optional[datetime] = None
    refresh_token_hash: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def public_view(self) -> dict:
        return {
            "account_id": self.account_id,
            "employee_id": self.employee_id,
            "email": self.email,
            "role": self.role.value,
        }

    def detail_view(self) -> dict:
        view = self.public_view()
        view.update(
            {
                "is_verified": self.is_verified,
                "last_login": self.last_login.isoformat() if self.last_login else None,
                "created_at": self.created_at.isoformat() if self.created_at else None,
            }
        )
        return view


@dataclass(frozen=True)
class Identity:
    """Reduced, secret-free identity attached to an authenticated request."""

    account_id: int
    employee_id: str
    email: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "Identity":
        return cls(
            account_id=account.account_id,
            employee_id=account.employee_id,
            email=account.email,
            role=account.role,
        )
