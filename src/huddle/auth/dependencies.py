"""FastAPI auth dependencies.

These are used as Depends() in route handlers to extract and validate
the current user from the `Authorization: Bearer <jwt>` header.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from huddle.auth.jwt import TokenError, user_id_from_token


class CurrentIdentity:
    """The authenticated user making the request.

    Services take the user id from here to scope queries to the
    workspaces the user belongs to.
    """

    def __init__(self, user_id: int):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id})"


def get_current_user_optional(
    authorization: Optional[str] = Header(None),
) -> Optional[CurrentIdentity]:
    """Extract current identity (optional — returns None if no auth)."""
    if authorization and authorization.startswith("Bearer "):
        return _authenticate_jwt(authorization[7:])
    return None


def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no auth)."""
    if not identity:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def _authenticate_jwt(token: str) -> CurrentIdentity:
    """Authenticate via JWT access token."""
    try:
        return CurrentIdentity(user_id=user_id_from_token(token))
    except TokenError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
