"""Workspace and membership routes.

Routes translate HTTP to service calls. Service errors (404 / 403 /
409 ...) are rendered by the ServiceError handler registered in main.py.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.db.engine import get_db
from huddle.schemas.workspace import (
    MemberAdd,
    MemberAdded,
    MemberRead,
    MemberSummary,
    WorkspaceCreate,
    WorkspaceRead,
    WorkspaceUpdate,
)
from huddle.services.workspace_service import WorkspaceService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> WorkspaceService:
    return WorkspaceService(db)


# ─── Workspaces ─────────────────────────────────────────

@router.get("/workspaces", response_model=list[WorkspaceRead])
async def list_workspaces(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    """Workspaces the caller is a member of."""
    return await svc.list_for_user(identity.user_id)


@router.post("/workspaces", response_model=WorkspaceRead, status_code=201)
async def create_workspace(
    body: WorkspaceCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    """Create a workspace. The caller becomes OWNER; #general is created."""
    return await svc.create_workspace(
        owner_id=identity.user_id, name=body.name, description=body.description
    )


@router.get("/workspaces/{workspace_id}", response_model=WorkspaceRead)
async def get_workspace(
    workspace_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    return await svc.get_workspace(workspace_id, identity.user_id)


@router.put("/workspaces/{workspace_id}", response_model=WorkspaceRead)
async def update_workspace(
    workspace_id: int,
    body: WorkspaceUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    return await svc.update_workspace(
        workspace_id, identity.user_id, name=body.name, description=body.description
    )


@router.delete("/workspaces/{workspace_id}", status_code=204)
async def archive_workspace(
    workspace_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    """Archive (soft-delete) a workspace."""
    await svc.archive_workspace(workspace_id, identity.user_id)
    return Response(status_code=204)


# ─── Members ────────────────────────────────────────────

@router.get("/workspaces/{workspace_id}/members", response_model=list[MemberRead])
async def list_members(
    workspace_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    return await svc.list_members(workspace_id, identity.user_id)


@router.post(
    "/workspaces/{workspace_id}/members", response_model=MemberAdded, status_code=201
)
async def add_member(
    workspace_id: int,
    body: MemberAdd,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: WorkspaceService = Depends(_svc),
):
    """Add an existing user to the workspace by email."""
    user = await svc.add_member(workspace_id, identity.user_id, body.email)
    return MemberAdded(
        message="Member added successfully",
        member=MemberSummary(
            user_id=user.id, email=user.email, display_name=user.display_name
        ),
    )
