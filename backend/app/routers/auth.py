"""
Authentication Router
Passwordless login: email -> one-time passcode -> bearer token.
New addresses are registered automatically on first login.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies.auth import get_admin_user
from app.models.models import User
from app.schemas.quiz import ApiResponse, CamelModel, UserRole
from app.services.auth import (
    OTPError,
    create_access_token,
    is_otp_rate_limited,
    issue_otp,
    normalize_email,
    otp_expiry_text,
    verify_otp,
    OTP_RESEND_WINDOW_MINUTES,
)
from app.services.email import EmailDeliveryError, get_email_service

router = APIRouter(prefix="/api/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


# ==================== Request/Response Models ====================

class EmailRequest(BaseModel):
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=12)


class OTPSentData(CamelModel):
    email: str
    expires_in: str


class AuthUser(CamelModel):
    id: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None


class LoginData(CamelModel):
    token: str
    user: AuthUser


class TestEmailData(CamelModel):
    email: str
    test_otp: str


# ==================== Endpoints ====================

@router.post("/login", response_model=ApiResponse[OTPSentData])
async def login(request: EmailRequest, db: Session = Depends(get_db)):
    """
    Request a login passcode. Unknown addresses are registered as users.
    """
    email = normalize_email(request.email)

    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email, role=UserRole.USER.value, is_active=True,
                    quiz_history=[], overall_weakness={})
        db.add(user)
        db.flush()
        logger.info(f"New user auto-registered: {email}")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive. Please contact admin."
        )

    code = issue_otp(db, email)

    try:
        await get_email_service().send_otp_email(
            db, email, code, user_id=user.id, expires_in=otp_expiry_text()
        )
    except EmailDeliveryError as e:
        logger.error(f"OTP delivery failed for {email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send OTP. Please try again."
        )

    db.commit()
    return ApiResponse(
        message="OTP sent to your email address",
        data=OTPSentData(email=email, expires_in=otp_expiry_text())
    )


@router.post("/verify-otp", response_model=ApiResponse[LoginData])
def verify_otp_endpoint(request: VerifyOTPRequest, db: Session = Depends(get_db)):
    """Exchange a valid passcode for a bearer token."""
    email = normalize_email(request.email)

    try:
        verify_otp(db, email, request.otp)
    except OTPError as e:
        db.commit()  # keep the attempt count
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    db.commit()

    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found or inactive"
        )

    logger.info(f"User {user.id} logged in")
    return ApiResponse(
        message="Login successful",
        data=LoginData(
            token=create_access_token(user),
            user=AuthUser(id=user.id, email=user.email, role=user.role, created_at=user.created_at)
        )
    )


@router.post("/resend-otp", response_model=ApiResponse[OTPSentData])
async def resend_otp(request: EmailRequest, db: Session = Depends(get_db)):
    """Issue a fresh passcode to an existing account (rate limited)."""
    email = normalize_email(request.email)

    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found or inactive"
        )

    if is_otp_rate_limited(db, email):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many OTP requests. Please wait {OTP_RESEND_WINDOW_MINUTES} minutes before requesting again."
        )

    code = issue_otp(db, email)

    try:
        await get_email_service().send_otp_email(
            db, email, code, user_id=user.id, expires_in=otp_expiry_text()
        )
    except EmailDeliveryError as e:
        logger.error(f"OTP resend failed for {email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to resend OTP. Please try again."
        )

    db.commit()
    return ApiResponse(
        message="New OTP sent to your email address",
        data=OTPSentData(email=email, expires_in=otp_expiry_text())
    )


@router.post("/test-email", response_model=ApiResponse[TestEmailData])
async def test_email(
    request: EmailRequest,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Send a sample OTP email to check provider configuration (admin only)."""
    logger.info(f"Admin {admin.id} testing email delivery to {request.email}")

    try:
        code = await get_email_service().send_test_email(db, request.email)
    except EmailDeliveryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Failed to send test email"
        )

    return ApiResponse(
        message="Test email sent successfully",
        data=TestEmailData(email=request.email, test_otp=code)
    )
