from __future__ import annotations

import logging
import smtplib
from typing import Optional, Protocol

from flask_mail import Mail, Message
from markupsafe import escape

logger = logging.getLogger(__name__)

_LAYOUT = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'
_BUTTON = (
    '<a href="{url}" style="background-color: #4F46E5; color: white; padding: 12px 24px; '
    'text-decoration: none; border-radius: 6px; display: inline-block;">{label}</a>'
)


class MailDeliveryError(Exception):
    """Raised when the outbound mail server rejects or cannot take a message."""


class Mailer(Protocol):
    def send_verification(self, email: str, token: str) -> None:
        raise NotImplementedError

    def send_password_reset(self, email: str, token: str) -> None:
        raise NotImplementedError

    def send_otp(self, email: str, otp: str) -> None:
        raise NotImplementedError

    def send_leave_decision(self, email: str, status: str, comment: Optional[str]) -> None:
        raise NotImplementedError


class FlaskMailer(Mailer):
    """Account and workflow emails delivered through Flask-Mail."""

    def __init__(self, mail: Mail, *, frontend_url: str, product_name: str = "HRMS"):
        self._mail = mail
        self._frontend_url = frontend_url.rstrip("/")
        self._product = product_name

    def _send(self, *, to: str, subject: str, html: str) -> None:
        msg = Message(subject=f"{subject} - {self._product}", recipients=[to], html=_LAYOUT.format(body=html))
        try:
            self._mail.send(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Could not send '{subject}' to {to}: {exc}") from exc

    def send_verification(self, email: str, token: str) -> None:
        url = f"{self._frontend_url}/verify-email?token={token}"
        logger.info("Verification link for %s: %s", email, url)
        self._send(
            to=email,
            subject="Verify Your Email",
            html=(
                f"<h2>Welcome to {self._product}!</h2>"
                "<p>Please click the link below to verify your email address:</p>"
                + _BUTTON.format(url=url, label="Verify Email")
                + "<p>If you didn't create an account, please ignore this email.</p>"
            ),
        )

    def send_password_reset(self, email: str, token: str) -> None:
        url = f"{self._frontend_url}/reset-password?token={token}"
        logger.info("Password reset link for %s: %s", email, url)
        self._send(
            to=email,
            subject="Password Reset",
            html=(
                "<h2>Password Reset Request</h2>"
                "<p>You requested a password reset. Click the link below to reset your password:</p>"
                + _BUTTON.format(url=url, label="Reset Password")
                + "<p>This link will expire in 1 hour.</p>"
            ),
        )

    def send_otp(self, email: str, otp: str) -> None:
        logger.info("Password reset OTP issued for %s", email)
        self._send(
            to=email,
            subject="Password Reset OTP",
            html=(
                "<h2>Password Reset OTP</h2>"
                "<p>Use this OTP to reset your password:</p>"
                f'<p style="font-size: 32px; font-weight: bold; letter-spacing: 8px;">{otp}</p>'
                "<p>This OTP will expire in 10 minutes.</p>"
            ),
        )

    def send_leave_decision(self, email: str, status: str, comment: Optional[str]) -> None:
        comment_html = f"<p><strong>Comment:</strong> {escape(comment)}</p>" if comment else ""
        self._send(
            to=email,
            subject=f"Leave Request {status.upper()}",
            html=(
                "<h2>Leave Request Update</h2>"
                f"<p>Your leave request has been <strong>{escape(status)}</strong>.</p>"
                + comment_html
                + "<p>Please log in to your dashboard for more details.</p>"
            ),
        )
