from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_body, ok
from ..common.validators import RequestValidator
from ..core.constants import API_PREFIX
from ..core.enums import Role
from ..container import Container

PREFIX = f"{API_PREFIX}/auth"


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    auth = container.auth_service

    @app.route(f"{PREFIX}/signup", methods=["POST"], endpoint="auth_signup")
    def signup():
        v = RequestValidator(json_body())
        employee_id = v.required("employee_id", "Employee ID is required")
        email = v.email("email")
        password = v.password("password")
        role = v.one_of("role", Role, "Invalid role", optional=True)
        v.raise_if_invalid()

        result = auth.signup(employee_id=employee_id, email=email, password=password, role=role or Role.EMPLOYEE)
        return ok(
            "User registered successfully. Please check your email to verify your account.",
            status_code=201,
            account_id=result.account_id,
            email=result.email,
            verification_email_sent=result.verification_email_sent,
        )

    @app.route(f"{PREFIX}/verify-email", methods=["GET"], endpoint="auth_verify_email")
    def verify_email():
        auth.verify_email(request.args.get("token"))
        return ok("Email verified successfully")

    @app.route(f"{PREFIX}/signin", methods=["POST"], endpoint="auth_signin")
    def signin():
        v = RequestValidator(json_body())
        email = v.email("email")
        password = v.required("password", "Password is required")
        v.raise_if_invalid()

        result = auth.signin(email=email, password=password)
        return ok(access_token=result.access_token, refresh_token=result.refresh_token, user=result.user)

    @app.route(f"{PREFIX}/refresh", methods=["POST"], endpoint="auth_refresh")
    def refresh():
        return ok(access_token=auth.refresh(json_body().get("refresh_token")))

    @app.route(f"{PREFIX}/signout", methods=["POST"], endpoint="auth_signout")
    @guards.login_required
    def signout(identity):
        auth.signout(identity)
        return ok("Signed out successfully")

    @app.route(f"{PREFIX}/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def forgot_password():
        v = RequestValidator(json_body())
        email = v.email("email")
        v.raise_if_invalid()
        return ok(auth.forgot_password(email))

    @app.route(f"{PREFIX}/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def reset_password():
        v = RequestValidator(json_body())
        token = v.required("token", "Reset token is required")
        new_password = v.password("new_password")
        v.raise_if_invalid()

        auth.reset_password(token=token, new_password=new_password)
        return ok("Password reset successfully")

    @app.route(f"{PREFIX}/send-otp", methods=["POST"], endpoint="auth_send_otp")
    def send_otp():
        v = RequestValidator(json_body())
        email = v.email("email")
        v.raise_if_invalid()
        return ok(auth.send_otp(email))

    @app.route(f"{PREFIX}/verify-otp", methods=["POST"], endpoint="auth_verify_otp")
    def verify_otp():
        v = RequestValidator(json_body())
        email = v.email("email")
        otp = v.required("otp", "OTP must be 6 digits")
        v.raise_if_invalid()

        auth.verify_otp(email=email, otp=otp)
        return ok("OTP verified successfully")

    @app.route(f"{PREFIX}/reset-password-otp", methods=["POST"], endpoint="auth_reset_password_otp")
    def reset_password_otp():
        v = RequestValidator(json_body())
        email = v.email("email")
        otp = v.required("otp", "OTP must be 6 digits")
        new_password = v.password("new_password")
        v.raise_if_invalid()

        auth.reset_password_with_otp(email=email, otp=otp, new_password=new_password)
        return ok("Password reset successfully")

    @app.route(f"{PREFIX}/change-password", methods=["PUT"], endpoint="auth_change_password")
    @guards.login_required
    def change_password(identity):
        v = RequestValidator(json_body())
        current = v.required("current_password", "Current password is required")
        new_password = v.password("new_password")
        v.raise_if_invalid()

        auth.change_password(identity, current_password=current, new_password=new_password)
        return ok("Password changed successfully")

    @app.route(f"{PREFIX}/add-employee", methods=["POST"], endpoint="auth_add_employee")
    @guards.elevated_required
    def add_employee(identity):
        v = RequestValidator(json_body())
        first_name = v.required("first_name", "First name is required")
        last_name = v.required("last_name", "Last name is required")
        email = v.email("email")
        password = v.password("password")
        role = v.one_of("role", Role, "Invalid role", optional=True)
        department = v.required("department", "Department is required")
        job_title = v.required("job_title", "Job title is required")
        basic_salary = v.number("basic_salary", "Basic salary must be a number")
        v.raise_if_invalid()

        employee = auth.add_employee(
            identity,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            department=department,
            job_title=job_title,
            basic_salary=basic_salary,
            role=role or Role.EMPLOYEE,
        )
        return ok("Employee added successfully", status_code=201, employee=employee)

    @app.route(f"{PREFIX}/me", methods=["GET"], endpoint="auth_me")
    @guards.login_required
    def me(identity):
        return ok(**auth.current_user(identity))
