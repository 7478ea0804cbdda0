from __future__ import annotations

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..core.constants import OTP_MINUTES, PASSWORD_HASH_METHOD, RESET_TOKEN_MINUTES
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    ValidationError,
)
from ..common.datetime_utils import now_local
from ..mail.mailer import MailDeliveryError, Mailer
from ..profiles.model import JobDetails, SalaryStructure, profile_to_dict
from ..profiles.repository import ProfileRepository
from .guards import require_elevated
from .model import Account, Identity
from .repository import AccountRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
FORGOT_PASSWORD_MESSAGE = "If the email is registered, a password reset link has been sent"
SEND_OTP_MESSAGE = "If the email is registered, an OTP has been sent"

# Compared against when the email is unknown so both failure paths hash once.
_DUMMY_HASH = generate_password_hash(secrets.token_urlsafe(16), method=PASSWORD_HASH_METHOD)


def hash_secret(value: str) -> str:
    return generate_password_hash(value, method=PASSWORD_HASH_METHOD)


def _check_secret(hashed: Optional[str], value: str) -> bool:
    if not hashed:
        return False
    try:
        return check_password_hash(hashed, value)
    except ValueError:
        # Unknown hash format (e.g. a placeholder value in seed data).
        return False


@dataclass(frozen=True)
class SignupResult:
    account_id: int
    email: str
    verification_email_sent: bool


@dataclass(frozen=True)
class SignInResult:
    access_token: str
    refresh_token: str
    user: dict


class AuthService:
    """Credential lifecycle: signup, verification, sessions and password recovery."""

    def __init__(
        self,
        accounts: AccountRepository,
        profiles: ProfileRepository,
        tokens: TokenService,
        mailer: Mailer,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._accounts = accounts
        self._profiles = profiles
        self._tokens = tokens
        self._mailer = mailer
        self._clock = clock

    def _access_token_for(self, account: Account) -> str:
        return self._tokens.issue_access_token(
            account_id=account.account_id,
            role=account.role.value,
            email=account.email,
            employee_id=account.employee_id,
        )

    def _send_verification(self, email: str, token: str) -> bool:
        try:
            self._mailer.send_verification(email, token)
        except MailDeliveryError as exc:
            logger.warning("Verification email to %s not sent: %s", email, exc)
            return False
        return True

    def signup(self, *, employee_id: str, email: str, password: str, role: Role = Role.EMPLOYEE) -> SignupResult:
        """Persist an unverified account, then email the verification link.

        The account stays registered when the email fails; the result reports it.
        """

        email = email.lower()
        existing = self._accounts.find_by_email_or_employee_id(email, employee_id)
        if existing:
            if existing.email == email:
                raise ValidationError("Email already registered")
            raise ValidationError("Employee ID already exists")

        token = secrets.token_urlsafe(32)
        account_id = self._accounts.create(
            employee_id=employee_id,
            email=email,
            password_hash=hash_secret(password),
            role=role,
            verification_token=token,
        )
        logger.info("Account %s registered for %s", account_id, employee_id)
        sent = self._send_verification(email, token)
        return SignupResult(account_id=account_id, email=email, verification_email_sent=sent)

    def verify_email(self, token: Optional[str]) -> None:
        if not token:
            raise ValidationError("Verification token is required")
        account = self._accounts.get_by_verification_token(token)
        if not account:
            raise ValidationError("Invalid verification token")
        self._accounts.mark_verified(account.account_id)

    def signin(self, *, email: str, password: str) -> SignInResult:
        account = self._accounts.get_by_email(email)
        if not account:
            _check_secret(_DUMMY_HASH, password)
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not _check_secret(account.password_hash, password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not account.is_verified:
            raise AuthorizationError("Please verify your email before signing in")

        refresh_token = self._tokens.issue_refresh_token(account_id=account.account_id)
        # Overwrites the previous hash, so older refresh tokens stop working.
        self._accounts.record_login(
            account.account_id, refresh_token_hash=hash_secret(refresh_token), at=self._clock()
        )
        logger.info("Account %s signed in", account.account_id)
        return SignInResult(
            access_token=self._access_token_for(account),
            refresh_token=refresh_token,
            user=account.public_view(),
        )

    def refresh(self, refresh_token: Optional[str]) -> str:
        if not refresh_token:
            raise AuthenticationError("Refresh token required")
        try:
            claims = self._tokens.verify(refresh_token, is_refresh=True)
        except TokenExpiredError as exc:
            raise TokenExpiredError("Refresh token expired") from exc
        except InvalidTokenError as exc:
            raise InvalidTokenError("Invalid refresh token") from exc

        account = self._accounts.get_by_id(int(claims["account_id"]))
        if not account or not _check_secret(account.refresh_token_hash, refresh_token):
            raise InvalidTokenError("Invalid refresh token")
        return self._access_token_for(account)

    def signout(self, identity: Identity) -> None:
        self._accounts.clear_refresh_token(identity.account_id)
        logger.info("Account %s signed out", identity.account_id)

    def forgot_password(self, email: str) -> str:
        account = self._accounts.get_by_email(email)
        if not account:
            logger.info("Password reset requested for unknown email")
            return FORGOT_PASSWORD_MESSAGE

        token = secrets.token_urlsafe(32)
        self._accounts.set_reset_token(
            account.account_id, token=token, expires=self._clock() + timedelta(minutes=RESET_TOKEN_MINUTES)
        )
        try:
            self._mailer.send_password_reset(account.email, token)
        except MailDeliveryError as exc:
            logger.warning("Password reset email to %s not sent: %s", account.email, exc)
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, *, token: str, new_password: str) -> None:
        account = self._accounts.get_by_reset_token(token) if token else None
        if (
            not account
            or account.reset_token_expires is None
            or account.reset_token_expires <= self._clock()
        ):
            raise ValidationError("Invalid or expired reset token")
        self._accounts.update_password(account.account_id, password_hash=hash_secret(new_password))
        logger.info("Password reset for account %s", account.account_id)

    def send_otp(self, email: str) -> str:
        account = self._accounts.get_by_email(email)
        if not account:
            return SEND_OTP_MESSAGE

        otp = f"{secrets.randbelow(900000) + 100000}"
        self._accounts.set_reset_otp(
            account.account_id, otp=otp, expires=self._clock() + timedelta(minutes=OTP_MINUTES)
        )
        try:
            self._mailer.send_otp(account.email, otp)
        except MailDeliveryError as exc:
            logger.warning("OTP email to %s not sent: %s", account.email, exc)
        return SEND_OTP_MESSAGE

    def _account_for_otp(self, email: str, otp: str) -> Account:
        account = self._accounts.get_by_email(email)
        if (
            not account
            or not account.reset_otp
            or account.reset_otp_expires is None
            or account.reset_otp_expires <= self._clock()
            or not hmac.compare_digest(account.reset_otp, str(otp))
        ):
            raise ValidationError("Invalid or expired OTP")
        return account

    def verify_otp(self, *, email: str, otp: str) -> None:
        self._account_for_otp(email, otp)

    def reset_password_with_otp(self, *, email: str, otp: str, new_password: str) -> None:
        account = self._account_for_otp(email, otp)
        self._accounts.update_password(account.account_id, password_hash=hash_secret(new_password))
        logger.info("Password reset by OTP for account %s", account.account_id)

    def change_password(self, identity: Identity, *, current_password: str, new_password: str) -> None:
        account = self._accounts.get_by_id(identity.account_id)
        if not account:
            raise NotFoundError("User not found")
        if not _check_secret(account.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        self._accounts.update_password(account.account_id, password_hash=hash_secret(new_password))

    def _next_employee_id(self) -> str:
        number = self._accounts.count() + 1
        while self._accounts.get_by_employee_id(f"EMP{number:04d}"):
            number += 1
        return f"EMP{number:04d}"

    def add_employee(
        self,
        identity: Identity,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        department: str,
        job_title: str,
        basic_salary: float,
        role: Role = Role.EMPLOYEE,
    ) -> dict:
        """Create a pre-verified account with its profile and a generated employee id."""

        require_elevated(identity)
        email = email.lower()
        if self._accounts.get_by_email(email):
            raise ValidationError("Email already registered")

        employee_id = self._next_employee_id()
        token = secrets.token_urlsafe(32)
        account_id = self._accounts.create(
            employee_id=employee_id,
            email=email,
            password_hash=hash_secret(password),
            role=role,
            verification_token=token,
            is_verified=True,
        )
        self._profiles.create(
            account_id=account_id,
            employee_id=employee_id,
            first_name=first_name,
            last_name=last_name,
            job_details=JobDetails(title=job_title, department=department, joining_date=self._clock().date()),
            salary_structure=SalaryStructure(basic=float(basic_salary)),
        )
        logger.info("Employee %s added by account %s", employee_id, identity.account_id)
        self._send_verification(email, token)

        return {
            "account_id": account_id,
            "employee_id": employee_id,
            "email": email,
            "role": role.value,
            "first_name": first_name,
            "last_name": last_name,
            "department": department,
            "job_title": job_title,
        }

    def current_user(self, identity: Identity) -> dict:
        account = self._accounts.get_by_id(identity.account_id)
        if not account:
            raise NotFoundError("User not found")
        profile = self._profiles.get_by_account_id(identity.account_id)
        return {"user": account.detail_view(), "profile": profile_to_dict(profile) if profile else None}
