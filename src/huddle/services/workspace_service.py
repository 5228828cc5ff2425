"""Workspace service — workspaces, membership and access checks.

Service layer separates business logic from HTTP routing. API routes
call services, services call the database. Every workspace-scoped
service goes through require_member() before touching data.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.db.models import Channel, User, Workspace, WorkspaceMember
from huddle.services.errors import ForbiddenError, InvalidInputError, NotFoundError

DEFAULT_CHANNEL_NAME = "general"
DEFAULT_CHANNEL_TOPIC = "Default channel for general discussions"


def _workspace_not_found() -> NotFoundError:
    return NotFoundError(
        "WORKSPACE_NOT_FOUND", "The requested workspace does not exist"
    )


def _already_member() -> InvalidInputError:
    return InvalidInputError(
        "ALREADY_MEMBER", "User is already a member of this workspace"
    )


class WorkspaceService:
    """Business logic for workspaces and their members."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Access checks ──────────────────────────────────

    async def get_membership(
        self, workspace_id: int, user_id: int
    ) -> Optional[WorkspaceMember]:
        result = await self.db.execute(
            select(WorkspaceMember).where(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.user_id == user_id,
            )
        )
        return result.scalars().first()

    async def require_member(self, workspace_id: int, user_id: int) -> Workspace:
        """Return the workspace if it exists and the user belongs to it."""
        workspace = await self.db.get(Workspace, workspace_id)
        if not workspace:
            raise _workspace_not_found()
        if not await self.get_membership(workspace_id, user_id):
            raise ForbiddenError(
                "NOT_WORKSPACE_MEMBER", "You are not a member of this workspace"
            )
        return workspace

    async def get_subscribable_workspace(
        self, workspace_id: int, user_id: Optional[int]
    ) -> Workspace:
        """Check a WebSocket subscription request.

        Archived workspaces cannot be subscribed to. An anonymous
        subscriber (user_id None, development only) skips the
        membership check.
        """
        workspace = await self.db.get(Workspace, workspace_id)
        if not workspace or workspace.archived:
            raise _workspace_not_found()
        if user_id is not None:
            await self.require_member(workspace_id, user_id)
        return workspace

    # ─── Workspaces ─────────────────────────────────────

    async def provision_workspace(
        self, name: str, description: Optional[str] = None
    ) -> Workspace:
        """Insert a workspace and its default #general channel (flush only)."""
        workspace = Workspace(name=name, description=description, archived=False)
        self.db.add(workspace)
        await self.db.flush()

        self.db.add(
            Channel(
                workspace_id=workspace.id,
                name=DEFAULT_CHANNEL_NAME,
                topic=DEFAULT_CHANNEL_TOPIC,
                channel_type="PUBLIC",
                archived=False,
            )
        )
        await self.db.flush()
        return workspace

    async def create_workspace(
        self, owner_id: int, name: str, description: Optional[str] = None
    ) -> Workspace:
        """Create a workspace owned by the caller, with a #general channel."""
        workspace = await self.provision_workspace(name, description)
        self.db.add(
            WorkspaceMember(workspace_id=workspace.id, user_id=owner_id, role="OWNER")
        )
        await self.db.commit()
        return workspace

    async def list_for_user(self, user_id: int) -> list[Workspace]:
        result = await self.db.execute(
            select(Workspace)
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
            .where(WorkspaceMember.user_id == user_id)
            .order_by(Workspace.id)
        )
        return list(result.scalars().all())

    async def get_workspace(self, workspace_id: int, user_id: int) -> Workspace:
        return await self.require_member(workspace_id, user_id)

    async def update_workspace(
        self,
        workspace_id: int,
        user_id: int,
        name: str,
        description: Optional[str] = None,
    ) -> Workspace:
        workspace = await self.require_member(workspace_id, user_id)
        workspace.name = name
        workspace.description = description
        await self.db.commit()
        return workspace

    async def archive_workspace(self, workspace_id: int, user_id: int) -> Workspace:
        """Soft-delete: the row stays, archived=True."""
        workspace = await self.require_member(workspace_id, user_id)
        workspace.archived = True
        await self.db.commit()
        return workspace

    async def find_global_workspace(self, name: str) -> Optional[Workspace]:
        result = await self.db.execute(
            select(Workspace)
            .where(Workspace.name == name, Workspace.archived.is_(False))
            .order_by(Workspace.id)
        )
        return result.scalars().first()

    # ─── Members ────────────────────────────────────────

    async def list_members(self, workspace_id: int, user_id: int) -> list[dict]:
        """Active (non-deactivated) members, oldest membership first."""
        await self.require_member(workspace_id, user_id)
        result = await self.db.execute(
            select(User, WorkspaceMember)
            .join(WorkspaceMember, WorkspaceMember.user_id == User.id)
            .where(
                WorkspaceMember.workspace_id == workspace_id,
                User.deactivated.is_(False),
            )
            .order_by(WorkspaceMember.created_at, WorkspaceMember.id)
        )
        return [
            {
                "user_id": user.id,
                "email": user.email,
                "display_name": user.display_name,
                "last_known_presence": user.last_known_presence,
                "role": member.role,
                "joined_at": member.created_at,
            }
            for user, member in result.all()
        ]

    async def add_member(
        self, workspace_id: int, requester_id: int, email: str
    ) -> User:
        """Add an existing user (looked up by email) as a MEMBER."""
        await self.require_member(workspace_id, requester_id)

        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalars().first()
        if not user:
            raise NotFoundError(
                "EMAIL_NOT_FOUND", "No user found with this email address"
            )

        if await self.get_membership(workspace_id, user.id):
            raise _already_member()

        self.db.add(
            WorkspaceMember(workspace_id=workspace_id, user_id=user.id, role="MEMBER")
        )
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise _already_member() from None
        return user
