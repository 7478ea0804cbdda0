from __future__ import annotations

from datetime import timedelta

import pytest

from src.hrms.hrms.auth.model import Identity
from src.hrms.hrms.auth.service import FORGOT_PASSWORD_MESSAGE, INVALID_CREDENTIALS, SEND_OTP_MESSAGE, hash_secret
from src.hrms.hrms.core.enums import Role
from src.hrms.hrms.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    ValidationError,
)
from tests.fakes import FakeMailer, World

PASSWORD = "Secret@123"


@pytest.fixture
def auth(world):
    return world.container.auth_service


def _signup_verified(world, auth, *, employee_id="EMP0100", email="new@example.com"):
    auth.signup(employee_id=employee_id, email=email, password=PASSWORD)
    _, _, token = world.mailer.last("verification")
    auth.verify_email(token)
    return world.accounts.get_by_email(email)


def test_signup_stores_hash_and_sends_verification(world, auth):
    result = auth.signup(employee_id="EMP0100", email="New@Example.com", password=PASSWORD)

    account = world.accounts.get_by_id(result.account_id)
    assert result.email == "new@example.com"
    assert result.verification_email_sent is True
    assert account.password_hash != PASSWORD
    assert account.is_verified is False
    assert account.role == Role.EMPLOYEE
    assert world.mailer.last("verification")[1] == "new@example.com"


def test_signup_duplicate_messages(world, auth):
    auth.signup(employee_id="EMP0100", email="new@example.com", password=PASSWORD)

    with pytest.raises(ValidationError, match="Email already registered"):
        auth.signup(employee_id="EMP0200", email="new@example.com", password=PASSWORD)
    with pytest.raises(ValidationError, match="Employee ID already exists"):
        auth.signup(employee_id="EMP0100", email="other@example.com", password=PASSWORD)


def test_signup_survives_mail_failure(tokens, clock):
    world = World(tokens=tokens, clock=clock, mailer=FakeMailer(fail=True))

    result = world.container.auth_service.signup(employee_id="EMP0100", email="new@example.com", password=PASSWORD)

    assert result.verification_email_sent is False
    assert world.accounts.get_by_id(result.account_id) is not None


def test_signin_failures_are_indistinguishable(world, auth):
    _signup_verified(world, auth)

    with pytest.raises(AuthenticationError) as unknown:
        auth.signin(email="nobody@example.com", password=PASSWORD)
    with pytest.raises(AuthenticationError) as wrong:
        auth.signin(email="new@example.com", password="Wrong@123")

    assert str(unknown.value) == str(wrong.value) == INVALID_CREDENTIALS
    assert unknown.value.status_code == wrong.value.status_code == 401


def test_unverified_account_cannot_sign_in(world, auth):
    auth.signup(employee_id="EMP0100", email="new@example.com", password=PASSWORD)
    with pytest.raises(AuthorizationError, match="verify your email"):
        auth.signin(email="new@example.com", password=PASSWORD)


def test_signin_refresh_and_signout(world, auth, clock):
    _signup_verified(world, auth)

    result = auth.signin(email="new@example.com", password=PASSWORD)
    assert result.user["email"] == "new@example.com"
    assert "password_hash" not in result.user
    assert world.accounts.get_by_email("new@example.com").last_login == clock.now

    access = auth.refresh(result.refresh_token)
    assert world.tokens.verify(access)["email"] == "new@example.com"

    second = auth.signin(email="new@example.com", password=PASSWORD)
    with pytest.raises(InvalidTokenError):
        auth.refresh(result.refresh_token)
    auth.refresh(second.refresh_token)

    account = world.accounts.get_by_email("new@example.com")
    auth.signout(Identity.from_account(account))
    with pytest.raises(InvalidTokenError):
        auth.refresh(second.refresh_token)


def test_refresh_requires_token(auth):
    with pytest.raises(AuthenticationError, match="Refresh token required"):
        auth.refresh(None)


def test_forgot_password_response_does_not_leak_registration(world, auth):
    _signup_verified(world, auth)

    assert auth.forgot_password("nobody@example.com") == FORGOT_PASSWORD_MESSAGE
    assert not [e for e in world.mailer.sent if e[0] == "password_reset"]
    assert auth.forgot_password("new@example.com") == FORGOT_PASSWORD_MESSAGE
    assert world.mailer.last("password_reset")[1] == "new@example.com"


def test_reset_token_is_single_use_and_expires(world, auth, clock):
    _signup_verified(world, auth)
    auth.forgot_password("new@example.com")
    _, _, token = world.mailer.last("password_reset")

    auth.reset_password(token=token, new_password="Changed@123")
    auth.signin(email="new@example.com", password="Changed@123")
    with pytest.raises(ValidationError, match="Invalid or expired reset token"):
        auth.reset_password(token=token, new_password="Again@1234")

    auth.forgot_password("new@example.com")
    _, _, late = world.mailer.last("password_reset")
    clock.now += timedelta(minutes=61)
    with pytest.raises(ValidationError, match="Invalid or expired reset token"):
        auth.reset_password(token=late, new_password="Again@1234")


def test_otp_flow(world, auth, clock):
    _signup_verified(world, auth)

    assert auth.send_otp("nobody@example.com") == SEND_OTP_MESSAGE
    assert auth.send_otp("new@example.com") == SEND_OTP_MESSAGE
    _, _, otp = world.mailer.last("otp")
    assert len(otp) == 6 and otp.isdigit()

    with pytest.raises(ValidationError, match="Invalid or expired OTP"):
        auth.verify_otp(email="new@example.com", otp="000000" if otp != "000000" else "111111")
    auth.verify_otp(email="new@example.com", otp=otp)

    auth.reset_password_with_otp(email="new@example.com", otp=otp, new_password="ByOtp@1234")
    auth.signin(email="new@example.com", password="ByOtp@1234")
    with pytest.raises(ValidationError):
        auth.verify_otp(email="new@example.com", otp=otp)


def test_expired_otp_is_rejected(world, auth, clock):
    _signup_verified(world, auth)
    auth.send_otp("new@example.com")
    _, _, otp = world.mailer.last("otp")

    clock.now += timedelta(minutes=11)
    with pytest.raises(ValidationError, match="Invalid or expired OTP"):
        auth.verify_otp(email="new@example.com", otp=otp)


def test_change_password_checks_current(world, auth):
    identity = Identity.from_account(_signup_verified(world, auth))
    with pytest.raises(ValidationError, match="Current password is incorrect"):
        auth.change_password(identity, current_password="Nope@1234", new_password="Fresh@1234")

    auth.change_password(identity, current_password=PASSWORD, new_password="Fresh@1234")
    auth.signin(email="new@example.com", password="Fresh@1234")


def test_add_employee_generates_ids_and_profile(world, auth, hr, employee):
    created = auth.add_employee(
        hr,
        first_name="Nia",
        last_name="Park",
        email="nia@example.com",
        password=PASSWORD,
        department="Finance",
        job_title="Analyst",
        basic_salary=40000,
    )

    assert created["employee_id"] == "EMP0003"
    account = world.accounts.get_by_email("nia@example.com")
    assert account.is_verified is True
    profile = world.profiles.get_by_employee_id("EMP0003")
    assert profile.salary_structure.basic == 40000.0
    assert profile.job_details.joining_date == world.clock.now.date()


def test_add_employee_skips_taken_ids(world, auth, hr):
    world.hire("EMP0003")
    created = auth.add_employee(
        hr,
        first_name="Nia",
        last_name="Park",
        email="nia@example.com",
        password=PASSWORD,
        department="Finance",
        job_title="Analyst",
        basic_salary=40000,
    )
    assert created["employee_id"] == "EMP0004"


def test_add_employee_requires_elevated_role(world, auth, employee):
    with pytest.raises(AuthorizationError):
        auth.add_employee(
            employee,
            first_name="Nia",
            last_name="Park",
            email="nia@example.com",
            password=PASSWORD,
            department="Finance",
            job_title="Analyst",
            basic_salary=40000,
        )


def test_seed_style_hash_never_matches(world, auth):
    world.accounts.create(
        employee_id="OLD1", email="old@example.com", password_hash="not-a-real-hash", role=Role.EMPLOYEE,
        verification_token=None, is_verified=True,
    )
    with pytest.raises(AuthenticationError):
        auth.signin(email="old@example.com", password=PASSWORD)
    assert hash_secret(PASSWORD) != hash_secret(PASSWORD)
