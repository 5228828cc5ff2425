"""Message routes.

- GET    /channels/:id/messages  newest first, `before` cursor for paging
- POST   /channels/:id/messages  post (broadcasts MESSAGE_CREATED)
- GET    /messages/:id
- PATCH  /messages/:id           author only
- DELETE /messages/:id           author only, soft delete
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.db.engine import get_db
from huddle.schemas.message import MessageCreate, MessageRead, MessageUpdate
from huddle.services.message_service import MessageService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> MessageService:
    return MessageService(db)


@router.get("/channels/{channel_id}/messages", response_model=list[MessageRead])
async def list_messages(
    channel_id: int,
    limit: int = Query(50, ge=1, le=200),
    before: Optional[int] = Query(None, description="Only messages with a smaller id"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    return await svc.list_messages(
        channel_id, identity.user_id, limit=limit, before=before
    )


@router.post(
    "/channels/{channel_id}/messages", response_model=MessageRead, status_code=201
)
async def create_message(
    channel_id: int,
    body: MessageCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    return await svc.create_message(
        channel_id,
        identity.user_id,
        content=body.content,
        parent_message_id=body.parent_message_id,
    )


@router.get("/messages/{message_id}", response_model=MessageRead)
async def get_message(
    message_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    return await svc.get_message(message_id, identity.user_id)


@router.patch("/messages/{message_id}", response_model=MessageRead)
async def update_message(
    message_id: int,
    body: MessageUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    return await svc.update_message(message_id, identity.user_id, body.content)


@router.delete("/messages/{message_id}", status_code=204)
async def delete_message(
    message_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    await svc.delete_message(message_id, identity.user_id)
    return Response(status_code=204)
