"""JWT token creation and verification.

- Access token: short-lived (2h), used for API calls and /ws
- Refresh token: long-lived (7 days), used to get new access tokens
- Email verification token: one-shot, proves control of an inbox

The `sub` claim carries the user id as a string (JWT registered claim).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from huddle.config import settings

ACCESS = "access"
REFRESH = "refresh"
EMAIL_VERIFICATION = "email_verification"


class TokenError(Exception):
    """Raised when token creation/verification fails."""


def _encode(user_id: int, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "exp": now + lifetime,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    """Create a JWT access token."""
    return _encode(
        user_id,
        ACCESS,
        timedelta(minutes=expires_minutes or settings.access_token_expire_minutes),
    )


def create_refresh_token(user_id: int, expires_days: Optional[int] = None) -> str:
    """Create a JWT refresh token."""
    return _encode(
        user_id,
        REFRESH,
        timedelta(days=expires_days or settings.refresh_token_expire_days),
    )


def create_email_verification_token(user_id: int) -> str:
    return _encode(user_id, EMAIL_VERIFICATION, timedelta(days=1))


def verify_token(token: str, expected_type: Optional[str] = None) -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure, including a `type` claim that does not
    match `expected_type` when one is given.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if expected_type and payload.get("type") != expected_type:
        raise TokenError(f"Token type must be {expected_type}")
    return payload


def user_id_from_token(token: str, expected_type: str = ACCESS) -> int:
    """Verify a token and return its subject as an int user id."""
    payload = verify_token(token, expected_type=expected_type)
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise TokenError("Invalid token: bad subject")
