"""Password hashing and strength rules.

Uses bcrypt for password hashing. bcrypt handles salting itself and
the work factor is configurable (HUDDLE_BCRYPT_ROUNDS, default 12).
Passwords are truncated to 72 bytes (bcrypt's limit).
"""

import re

import bcrypt

from huddle.config import settings

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def is_strong_password(password: str) -> bool:
    """At least 8 chars with upper, lower, digit and a special character."""
    return (
        len(password) >= 8
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[a-z]", password) is not None
        and re.search(r"[0-9]", password) is not None
        and re.search(r"[^A-Za-z0-9]", password) is not None
    )


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))
