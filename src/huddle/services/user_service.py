"""User service — registration, credential checks and profiles.

Registration is more than inserting a row: every new user gets a
personal workspace with a #general channel (they own it, and it becomes
their default), and joins the shared "global" workspace when one exists.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.jwt import EMAIL_VERIFICATION, TokenError, user_id_from_token
from huddle.auth.password import (
    hash_password,
    is_strong_password,
    is_valid_email,
    verify_password,
)
from huddle.config import settings
from huddle.db.models import User, WorkspaceMember
from huddle.services.errors import (
    AuthError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from huddle.services.workspace_service import WorkspaceService

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.workspaces = WorkspaceService(db)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("USER_NOT_FOUND", "User not found")
        return user

    # ─── Registration ───────────────────────────────────

    async def register(self, email: str, password: str, display_name: str) -> User:
        if not is_valid_email(email):
            raise InvalidInputError(
                "INVALID_EMAIL", "Please provide a valid email address"
            )
        if not is_strong_password(password):
            raise InvalidInputError(
                "WEAK_PASSWORD",
                "Password must be at least 8 characters and include uppercase, "
                "lowercase, number, and special character",
            )
        if await self.get_by_email(email):
            raise ConflictError("EMAIL_IN_USE", "Email already registered")

        global_ws = await self.workspaces.find_global_workspace(
            settings.global_workspace_name
        )

        personal = await self.workspaces.provision_workspace(
            name=f"{display_name}'s Workspace",
            description="Default workspace",
        )

        user = User(
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
            default_workspace_id=personal.id,
            email_verified=settings.auto_verify_email,
            deactivated=False,
            last_known_presence="ONLINE",
            last_login=datetime.now(timezone.utc),
        )
        self.db.add(user)
        try:
            await self.db.flush()

            self.db.add(
                WorkspaceMember(workspace_id=personal.id, user_id=user.id, role="OWNER")
            )
            if global_ws:
                self.db.add(
                    WorkspaceMember(
                        workspace_id=global_ws.id, user_id=user.id, role="MEMBER"
                    )
                )

            await self.db.commit()
        except IntegrityError:
            # Same email registered concurrently; drops the personal workspace too
            await self.db.rollback()
            raise ConflictError("EMAIL_IN_USE", "Email already registered") from None
        logger.info(
            "huddle.user.registered",
            user_id=user.id,
            workspace_id=personal.id,
            joined_global=global_ws is not None,
        )
        return user

    # ─── Credentials ────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        """Check credentials and record the login. Raises AuthError."""
        user = await self.get_by_email(email)
        if (
            not user
            or not user.password_hash
            or user.deactivated
            or not verify_password(password, user.password_hash)
        ):
            raise AuthError("INVALID_CREDENTIALS", "Invalid email or password")

        user.last_login = datetime.now(timezone.utc)
        user.last_known_presence = "ONLINE"
        await self.db.commit()
        return user

    async def logout(self, user_id: int) -> None:
        user = await self.db.get(User, user_id)
        if user:
            user.last_known_presence = "OFFLINE"
            await self.db.commit()

    async def verify_email(self, token: str) -> User:
        try:
            user_id = user_id_from_token(token, expected_type=EMAIL_VERIFICATION)
        except TokenError:
            user_id = None
        user = await self.db.get(User, user_id) if user_id is not None else None
        if not user:
            raise InvalidInputError(
                "INVALID_TOKEN", "The verification token is invalid or has expired"
            )
        user.email_verified = True
        await self.db.commit()
        return user

    # ─── Profile ────────────────────────────────────────

    async def update_profile(
        self,
        user_id: int,
        display_name: Optional[str] = None,
        status_message: Optional[str] = None,
        last_known_presence: Optional[str] = None,
    ) -> User:
        user = await self.get_user(user_id)
        if display_name is not None:
            user.display_name = display_name
        if status_message is not None:
            user.status_message = status_message
        if last_known_presence is not None:
            user.last_known_presence = last_known_presence
        await self.db.commit()
        return user
