from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Account


class AccountRepository(Protocol):
    """Credential store.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, account_id: int) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[Account]:
        raise NotImplementedError

    def find_by_email_or_employee_id(self, email: str, employee_id: str) -> Optional[Account]:
        raise NotImplementedError

    def get_by_verification_token(self, token: str) -> Optional[Account]:
        raise NotImplementedError

    def get_by_reset_token(self, token: str) -> Optional[Account]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: str,
        email: str,
        password_hash: str,
        role: Role,
        verification_token: Optional[str],
        is_verified: bool = False,
    ) -> int:
        raise NotImplementedError

    def mark_verified(self, account_id: int) -> bool:
        raise NotImplementedError

    def record_login(self, account_id: int, *, refresh_token_hash: str, at: datetime) -> bool:
        raise NotImplementedError

    def clear_refresh_token(self, account_id: int) -> bool:
        raise NotImplementedError

    def set_reset_token(self, account_id: int, *, token: str, expires: datetime) -> bool:
        raise NotImplementedError

    def set_reset_otp(self, account_id: int, *, otp: str, expires: datetime) -> bool:
        raise NotImplementedError

    def update_password(self, account_id: int, *, password_hash: str) -> bool:
        """Store a new hash and consume any pending reset token or OTP."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def list_by_ids(self, account_ids: Iterable[int]) -> Sequence[Account]:
        raise NotImplementedError

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[Account]:
        raise NotImplementedError
