"""
Tests for email rendering and delivery logging (no provider key in tests).
"""

import asyncio

import jinja2
import pytest

from app.models.models import EmailLog
from app.services.email.email_service import EmailDeliveryError, EmailService
from app.services.email.email_templates import (
    APP_NAME,
    render_otp_email,
    render_template,
    render_welcome_email,
)
from tests.conftest import create_user


class TestTemplates:

    def test_otp_email_shows_code_and_expiry(self):
        html = render_otp_email("482913", "10 minutes")

        assert "482913" in html
        assert "10 minutes" in html
        assert APP_NAME in html

    def test_welcome_email_lists_features_and_escapes_input(self):
        html = render_welcome_email("<b>kid</b>@test.com", "User", ["Take adaptive quizzes"])

        assert "Take adaptive quizzes" in html
        assert "&lt;b&gt;kid&lt;/b&gt;@test.com" in html
        assert "<b>kid</b>" not in html

    def test_missing_variable_is_an_error(self):
        with pytest.raises(jinja2.UndefinedError):
            render_template("otp.html", {"expires_in": "10 minutes", "is_test": False})


class TestDelivery:

    def test_otp_falls_back_to_log_outside_production(self, db):
        sent = asyncio.run(EmailService().send_otp_email(db, "kid@test.com", "482913"))

        assert sent is False
        log = db.query(EmailLog).filter(EmailLog.recipient_email == "kid@test.com").one()
        assert log.status == "failed"
        assert log.error_message == "Resend API key not configured"

    def test_otp_failure_raises_in_production(self, db, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")

        with pytest.raises(EmailDeliveryError):
            asyncio.run(EmailService().send_otp_email(db, "kid@test.com", "482913"))

    def test_welcome_email_is_logged(self, db):
        user = create_user(db, email="welcome@test.com", role="admin")

        sent = asyncio.run(EmailService().send_welcome_email(db, user))

        assert sent is False
        log = db.query(EmailLog).filter(EmailLog.recipient_email == "welcome@test.com").one()
        assert log.email_type == "welcome"
        assert log.subject.endswith("Admin Account Created")
