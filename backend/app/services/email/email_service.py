"""
Core email service using Resend API.
Handles sending and logging all email notifications.
"""

import os
import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.models.models import EmailLog, User
from app.services.email.email_templates import APP_NAME, render_otp_email, render_welcome_email

logger = logging.getLogger(__name__)

USER_FEATURES = [
    "Take adaptive quizzes tailored to your learning needs",
    "Track your progress and identify weak areas",
    "Get AI-powered explanations for questions",
    "Monitor your improvement over time",
]

ADMIN_FEATURES = [
    "Manage users in the system",
    "View all quiz reports and analytics",
    "Monitor system performance",
    "Add or remove users",
]

TEST_OTP = "123456"

# Lazy-loaded Resend client
_resend = None


class EmailDeliveryError(Exception):
    """Raised when an email that the caller depends on could not be sent"""
    pass


def get_resend():
    """Lazy-load Resend client to avoid import-time errors."""
    global _resend
    if _resend is None:
        import resend
        api_key = os.getenv("RESEND_API_KEY")
        if not api_key:
            logger.warning("RESEND_API_KEY not set - emails will not be sent")
            return None
        resend.api_key = api_key
        _resend = resend
    return _resend


def is_production() -> bool:
    return os.getenv("ENVIRONMENT", "development").lower() == "production"


class EmailService:
    """
    Email service for sending transactional emails.
    Integrates with Resend API and logs all email activity.
    """

    def __init__(self):
        self.from_email = os.getenv("EMAIL_FROM", f"{APP_NAME} <noreply@resend.dev>")

    async def send_otp_email(
        self,
        db: Session,
        email: str,
        otp: str,
        user_id: Optional[str] = None,
        expires_in: str = "10 minutes"
    ) -> bool:
        """
        Send a login passcode. Login cannot continue without it, so failures
        raise; outside production the code is logged instead.

        Returns:
            True if the email was sent, False if the console fallback was used

        Raises:
            EmailDeliveryError: Delivery failed in production
        """
        html_content = render_otp_email(otp, expires_in)

        sent, error = await self._send_and_log(
            db=db,
            user_id=user_id,
            email_type="otp",
            to_email=email,
            subject=f"Your Login OTP - {APP_NAME}",
            html_content=html_content
        )
        if sent:
            return True

        if not is_production():
            logger.warning(f"EMAIL FAILED - development fallback. OTP for {email}: {otp}")
            return False

        raise EmailDeliveryError(error or "Failed to send OTP email")

    async def send_welcome_email(self, db: Session, user: User) -> bool:
        """
        Send welcome email after an admin creates an account.
        Returns True if sent successfully; failures are only logged.
        """
        role = "Admin" if user.is_admin else "User"
        html_content = render_welcome_email(
            user.email, role, ADMIN_FEATURES if user.is_admin else USER_FEATURES
        )

        sent, _ = await self._send_and_log(
            db=db,
            user_id=user.id,
            email_type="welcome",
            to_email=user.email,
            subject=f"Welcome to {APP_NAME} - {role} Account Created",
            html_content=html_content
        )
        return sent

    async def send_test_email(self, db: Session, email: str) -> str:
        """
        Send a sample OTP email to check the provider configuration.

        Returns:
            The sample code that was sent

        Raises:
            EmailDeliveryError: If the provider rejected the email
        """
        html_content = render_otp_email(TEST_OTP, "10 minutes", is_test=True)

        sent, error = await self._send_and_log(
            db=db,
            user_id=None,
            email_type="test",
            to_email=email,
            subject=f"Test Email - {APP_NAME}",
            html_content=html_content
        )
        if not sent:
            raise EmailDeliveryError(error or "Failed to send test email")
        return TEST_OTP

    async def _send_and_log(
        self,
        db: Session,
        user_id: Optional[str],
        email_type: str,
        to_email: str,
        subject: str,
        html_content: str
    ) -> Tuple[bool, Optional[str]]:
        """Send email via Resend and log the result. Returns (sent, error)."""
        log = EmailLog(
            user_id=user_id,
            email_type=email_type,
            recipient_email=to_email,
            subject=subject,
            provider="resend",
            status="queued"
        )
        db.add(log)
        db.commit()
        db.refresh(log)

        resend = get_resend()
        if not resend:
            log.status = "failed"
            log.error_message = "Resend API key not configured"
            db.commit()
            return False, log.error_message

        try:
            result = resend.Emails.send({
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html_content
            })

            log.status = "sent"
            log.provider_message_id = result.get("id")
            log.sent_at = datetime.utcnow()
            db.commit()

            logger.info(f"Email sent: {email_type} to {to_email} (id: {result.get('id')})")
            return True, None

        except Exception as e:
            log.status = "failed"
            log.error_message = str(e)
            db.commit()

            logger.error(f"Failed to send {email_type} email to {to_email}: {e}")
            return False, str(e)


# Singleton instance
_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get the singleton EmailService instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
