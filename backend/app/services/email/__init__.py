"""
Email service for Quiz Learner.
Handles OTP delivery and welcome emails using Resend.
"""

from app.services.email.email_service import EmailDeliveryError, EmailService, get_email_service

__all__ = [
    "EmailDeliveryError",
    "EmailService",
    "get_email_service",
]
