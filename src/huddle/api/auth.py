"""Auth API — registration, login, token refresh, email verification.

- POST /auth/register      → create account + personal workspace
- POST /auth/login         → email/password → JWT tokens
- POST /auth/refresh       → refresh token → new token pair
- POST /auth/logout        → mark the user offline (tokens are stateless)
- POST /auth/verify-email  → consume an email verification token
- GET  /auth/validate      → current user info for a valid access token
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.auth.jwt import (
    REFRESH,
    TokenError,
    create_access_token,
    create_refresh_token,
    user_id_from_token,
)
from huddle.db.engine import get_db
from huddle.schemas.auth import (
    AuthUser,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    VerifyEmailRequest,
)
from huddle.services.errors import AuthError, NotFoundError
from huddle.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_svc)):
    """Create a new user account with a personal workspace."""
    await svc.register(
        email=body.email,
        password=body.password,
        display_name=body.display_name,
    )
    return MessageResponse(message="User created successfully")


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, svc: UserService = Depends(_svc)):
    """Login with email and password → JWT tokens."""
    user = await svc.authenticate(body.email, body.password)
    return LoginResponse(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
        user=AuthUser.model_validate(user),
    )


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest):
    """Exchange a refresh token for a new token pair."""
    try:
        user_id = user_id_from_token(body.refresh_token, expected_type=REFRESH)
    except TokenError:
        raise AuthError("INVALID_TOKEN", "Invalid or expired refresh token")

    return TokenResponse(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(user_id),
    )


# ─── Logout ─────────────────────────────────────────────


@router.post("/logout", response_model=MessageResponse)
async def logout(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Mark the user offline. Clients discard their tokens."""
    await svc.logout(identity.user_id)
    return MessageResponse(message="Logout successful")


# ─── Email verification ─────────────────────────────────


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(body: VerifyEmailRequest, svc: UserService = Depends(_svc)):
    await svc.verify_email(body.token)
    return MessageResponse(message="Email verified successfully")


# ─── Current user ───────────────────────────────────────


@router.get("/validate")
async def validate(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Validate the access token and return fresh user info."""
    try:
        user = await svc.get_user(identity.user_id)
    except NotFoundError:
        raise HTTPException(status_code=401, detail="User not found")
    return {"user": AuthUser.model_validate(user).model_dump()}
