"""Channel routes.

Creating, updating or archiving a channel also pushes an event to every
WebSocket subscribed to the channel's workspace (see ChannelService).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.db.engine import get_db
from huddle.schemas.channel import ChannelCreate, ChannelRead, ChannelUpdate
from huddle.services.channel_service import ChannelService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> ChannelService:
    return ChannelService(db)


@router.get("/workspaces/{workspace_id}/channels", response_model=list[ChannelRead])
async def list_channels(
    workspace_id: int,
    include_archived: Optional[bool] = Query(None, description="Include archived channels"),
    include_archived_camel: Optional[bool] = Query(
        None, alias="includeArchived", description="camelCase spelling of include_archived"
    ),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ChannelService = Depends(_svc),
):
    if include_archived is None:
        include_archived = include_archived_camel
    return await svc.list_channels(
        workspace_id, identity.user_id, include_archived=bool(include_archived)
    )


@router.post("/channels", response_model=ChannelRead, status_code=201)
async def create_channel(
    body: ChannelCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ChannelService = Depends(_svc),
):
    """Create a channel and broadcast CHANNEL_CREATED to the workspace."""
    return await svc.create_channel(
        user_id=identity.user_id,
        workspace_id=body.workspace_id,
        name=body.name,
        channel_type=body.channel_type,
        description=body.description,
        topic=body.topic,
    )


@router.get("/channels/{channel_id}", response_model=ChannelRead)
async def get_channel(
    channel_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ChannelService = Depends(_svc),
):
    return await svc.get_channel(channel_id, identity.user_id)


@router.patch("/channels/{channel_id}", response_model=ChannelRead)
async def update_channel(
    channel_id: int,
    body: ChannelUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ChannelService = Depends(_svc),
):
    """Partially update a channel and broadcast CHANNEL_UPDATED."""
    return await svc.update_channel(
        channel_id,
        identity.user_id,
        name=body.name,
        description=body.description,
        topic=body.topic,
    )


@router.delete("/channels/{channel_id}", status_code=204)
async def archive_channel(
    channel_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ChannelService = Depends(_svc),
):
    """Archive a channel and broadcast CHANNEL_ARCHIVED."""
    await svc.archive_channel(channel_id, identity.user_id)
    return Response(status_code=204)
