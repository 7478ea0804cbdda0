from __future__ import annotations

from src.hrms.hrms.mail.mailer import FlaskMailer


class CapturingMail:
    def __init__(self):
        self.outbox = []

    def send(self, message):
        self.outbox.append(message)


def test_leave_decision_escapes_admin_comment(app):
    mail = CapturingMail()
    mailer = FlaskMailer(mail, frontend_url="http://localhost:3000/")

    with app.app_context():
        mailer.send_leave_decision("evan@example.com", "rejected", '<script>alert("x")</script> & more')

    (message,) = mail.outbox
    assert message.subject == "Leave Request REJECTED - HRMS"
    assert "<script>" not in message.html
    assert "&lt;script&gt;alert(&#34;x&#34;)&lt;/script&gt; &amp; more" in message.html


def test_verification_link_uses_frontend_url(app):
    mail = CapturingMail()

    with app.app_context():
        FlaskMailer(mail, frontend_url="http://localhost:3000/").send_verification("a@example.com", "tok123")

    assert 'href="http://localhost:3000/verify-email?token=tok123"' in mail.outbox[0].html
