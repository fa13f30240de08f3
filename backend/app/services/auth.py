"""
Authentication Service
Handles one-time passcodes (OTP) and JWT bearer token generation.

Login flow:
1. issue_otp() stores the SHA-256 hash of a fresh 6-digit code and
   removes any earlier codes for the same address
2. the code is emailed to the user
3. verify_otp() checks the code (expiry, single use, attempt limit)
4. create_access_token() issues a bearer token carrying id, email and role
"""
import os
import hmac
import secrets
import hashlib
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.models.models import EmailLog, OneTimePassword, User

# JWT Configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "").strip()
if not JWT_SECRET_KEY or len(JWT_SECRET_KEY) < 32:
    raise RuntimeError(
        "CRITICAL: JWT_SECRET_KEY environment variable must be set to a secure value "
        "(at least 32 characters). "
        "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
    )
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))

# OTP Configuration
OTP_LENGTH = 6
OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))
OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))
OTP_RESEND_LIMIT = int(os.getenv("OTP_RESEND_LIMIT", "3"))
OTP_RESEND_WINDOW_MINUTES = int(os.getenv("OTP_RESEND_WINDOW_MINUTES", "10"))


class TokenError(Exception):
    """Raised when token is invalid or expired"""
    pass


class OTPError(Exception):
    """Raised when a one-time passcode cannot be accepted"""
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_token(token: str) -> str:
    """SHA-256 hex digest used to store OTP codes."""
    return hashlib.sha256(token.encode()).hexdigest()


def verify_token_hash(plain_token: str, hashed_token: str) -> bool:
    return hmac.compare_digest(hash_token(plain_token), hashed_token)


def generate_otp() -> str:
    """Cryptographically random 6-digit code (leading zeros kept)."""
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def otp_expiry_text() -> str:
    return f"{OTP_EXPIRE_MINUTES} minutes"


def issue_otp(db: Session, email: str) -> str:
    """
    Replace any outstanding codes for the address with a new one.

    Returns:
        The plain code (to be emailed); only its hash is persisted
    """
    email = normalize_email(email)
    code = generate_otp()

    db.query(OneTimePassword).filter(OneTimePassword.email == email).delete(
        synchronize_session=False
    )
    db.add(OneTimePassword(
        email=email,
        code_hash=hash_token(code),
        expires_at=datetime.utcnow() + timedelta(minutes=OTP_EXPIRE_MINUTES),
        is_used=False,
        attempts=0,
    ))
    db.flush()
    return code


def verify_otp(db: Session, email: str, code: str) -> None:
    """
    Check a submitted code and mark it used.

    Wrong guesses count against the code; after OTP_MAX_ATTEMPTS it is burned.
    Changes are flushed; the caller commits (also on failure, so attempt
    counts persist).

    Raises:
        OTPError: Missing, used, expired, exhausted or wrong code
    """
    email = normalize_email(email)
    otp = db.query(OneTimePassword).filter(
        OneTimePassword.email == email
    ).order_by(OneTimePassword.created_at.desc()).first()

    if not otp or otp.is_used:
        raise OTPError("Invalid or expired OTP. Please request a new one.")

    if otp.expires_at < datetime.utcnow():
        raise OTPError("OTP has expired. Please request a new one.")

    if otp.attempts >= OTP_MAX_ATTEMPTS:
        raise OTPError("Too many failed attempts. Please request a new OTP.")

    if not verify_token_hash(code.strip(), otp.code_hash):
        otp.attempts += 1
        if otp.attempts >= OTP_MAX_ATTEMPTS:
            otp.is_used = True
        db.flush()
        remaining = max(0, OTP_MAX_ATTEMPTS - otp.attempts)
        if remaining == 0:
            raise OTPError("Too many failed attempts. Please request a new OTP.")
        raise OTPError(f"Invalid OTP. {remaining} attempt(s) remaining.")

    otp.is_used = True
    db.flush()


def count_recent_otp_emails(db: Session, email: str) -> int:
    """OTP emails logged for the address inside the resend window."""
    window_start = datetime.utcnow() - timedelta(minutes=OTP_RESEND_WINDOW_MINUTES)
    return db.query(EmailLog).filter(
        EmailLog.recipient_email == normalize_email(email),
        EmailLog.email_type == "otp",
        EmailLog.created_at >= window_start
    ).count()


def is_otp_rate_limited(db: Session, email: str) -> bool:
    return count_recent_otp_emails(db, email) >= OTP_RESEND_LIMIT


def create_access_token(
    user: User,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        user: User whose id, email and role are encoded
        expires_delta: Optional custom expiration time

    Returns:
        JWT access token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.utcnow()
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "type": "access",
        "exp": now + expires_delta,
        "iat": now
    }

    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str, token_type: str = "access") -> dict:
    """
    Verify and decode a JWT token.

    Raises:
        TokenError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])

        if payload.get("type") != token_type:
            raise TokenError(f"Invalid token type. Expected {token_type}")

        if "sub" not in payload:
            raise TokenError("Token missing user ID")

        return payload

    except JWTError as e:
        if "expired" in str(e).lower():
            raise TokenError("Token has expired")
        raise TokenError(f"Invalid token: {str(e)}")
