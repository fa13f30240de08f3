"""
Tests for authentication router endpoints.

Tests cover:
- Login with auto-registration
- OTP verification, wrong attempts and expiry
- OTP resend rate limiting
- Bearer token handling on protected routes
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from app.models.models import EmailLog, OneTimePassword, User
from app.services.auth import create_access_token, hash_token, verify_token
from tests.conftest import auth_header, create_user

OTP_CODE = "482913"


@pytest.fixture
def fixed_otp():
    """Make every issued passcode predictable"""
    with patch("app.services.auth.generate_otp", return_value=OTP_CODE):
        yield OTP_CODE


def login(client, email="student@test.com"):
    return client.post("/api/auth/login", json={"email": email})


class TestLogin:

    def test_login_auto_registers_new_email(self, client, db, fixed_otp):
        response = login(client, "New.Student@Test.com")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {"email": "new.student@test.com", "expiresIn": "10 minutes"}

        user = db.query(User).filter(User.email == "new.student@test.com").first()
        assert user is not None
        assert user.role == "user"
        assert user.quiz_history == []

    def test_only_the_hash_is_stored(self, client, db, fixed_otp):
        login(client)

        otp = db.query(OneTimePassword).filter(OneTimePassword.email == "student@test.com").one()
        assert otp.code_hash == hash_token(OTP_CODE)
        assert otp.code_hash != OTP_CODE

    def test_new_login_replaces_previous_codes(self, client, db, fixed_otp):
        login(client)
        login(client)

        assert db.query(OneTimePassword).filter(OneTimePassword.email == "student@test.com").count() == 1

    def test_delivery_is_logged(self, client, db, fixed_otp):
        login(client)

        log = db.query(EmailLog).filter(EmailLog.recipient_email == "student@test.com").one()
        assert log.email_type == "otp"
        # No RESEND_API_KEY in tests: development fallback
        assert log.status == "failed"

    def test_inactive_user_is_refused(self, client, db, fixed_otp):
        create_user(db, email="blocked@test.com", is_active=False)

        response = login(client, "blocked@test.com")

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Account is inactive. Please contact admin."}

    def test_invalid_email_is_a_400(self, client):
        response = login(client, "not-an-email")

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestVerifyOTP:

    def test_correct_code_returns_token(self, client, db, fixed_otp):
        login(client)

        response = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": OTP_CODE})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "student@test.com"
        assert data["user"]["role"] == "user"
        payload = verify_token(data["token"])
        assert payload["sub"] == data["user"]["id"]
        assert payload["role"] == "user"

    def test_code_cannot_be_reused(self, client, fixed_otp):
        login(client)
        client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": OTP_CODE})

        response = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": OTP_CODE})

        assert response.status_code == 400

    def test_wrong_code_counts_attempts(self, client, db, fixed_otp):
        login(client)

        first = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": "000000"})
        second = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": "000000"})

        assert first.status_code == 400
        assert first.json()["message"] == "Invalid OTP. 2 attempt(s) remaining."
        assert second.json()["message"] == "Invalid OTP. 1 attempt(s) remaining."
        otp = db.query(OneTimePassword).filter(OneTimePassword.email == "student@test.com").one()
        assert otp.attempts == 2

    def test_third_wrong_attempt_burns_the_code(self, client, fixed_otp):
        login(client)
        for _ in range(3):
            response = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": "000000"})
        assert response.json()["message"] == "Too many failed attempts. Please request a new OTP."

        response = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": OTP_CODE})

        assert response.status_code == 400

    def test_expired_code_is_rejected(self, client, db, fixed_otp):
        login(client)
        otp = db.query(OneTimePassword).filter(OneTimePassword.email == "student@test.com").one()
        otp.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.post("/api/auth/verify-otp", json={"email": "student@test.com", "otp": OTP_CODE})

        assert response.status_code == 400
        assert response.json()["message"] == "OTP has expired. Please request a new one."

    def test_unknown_email_is_rejected(self, client):
        response = client.post("/api/auth/verify-otp", json={"email": "ghost@test.com", "otp": OTP_CODE})

        assert response.status_code == 400


class TestResendOTP:

    def test_resend_for_unknown_user_is_404(self, client):
        response = client.post("/api/auth/resend-otp", json={"email": "ghost@test.com"})

        assert response.status_code == 404

    def test_resend_is_rate_limited(self, client, fixed_otp):
        login(client)

        statuses = [
            client.post("/api/auth/resend-otp", json={"email": "student@test.com"}).status_code
            for _ in range(3)
        ]

        # login + 2 resends = 3 OTP emails in the window
        assert statuses == [200, 200, 429]


class TestProtectedRoutes:

    def test_missing_token_is_401(self, client):
        response = client.get("/api/user/profile")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access denied. No token provided."}

    def test_garbage_token_is_401(self, client):
        response = client.get("/api/user/profile", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_expired_token_is_401(self, client, test_user):
        token = create_access_token(test_user, expires_delta=timedelta(seconds=-5))

        response = client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_deactivated_user_token_is_401(self, client, db, test_user):
        headers = auth_header(test_user)
        test_user.is_active = False
        db.commit()

        response = client.get("/api/user/profile", headers=headers)

        assert response.status_code == 401

    def test_student_cannot_use_admin_routes(self, client, auth_headers):
        response = client.post("/api/auth/test-email", json={"email": "x@test.com"}, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"
