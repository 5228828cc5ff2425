"""Pinned message routes."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.db.engine import get_db
from huddle.schemas.message import PinCreate, PinnedMessageRead, PinRead
from huddle.services.pin_service import PinService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> PinService:
    return PinService(db)


@router.post("/messages/{message_id}/pin", response_model=PinRead, status_code=201)
async def pin_message(
    message_id: int,
    body: PinCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PinService = Depends(_svc),
):
    """Pin a message with a reason (1-500 characters)."""
    return await svc.pin_message(message_id, identity.user_id, body.reason)


@router.delete("/messages/{message_id}/pin", status_code=204)
async def unpin_message(
    message_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PinService = Depends(_svc),
):
    await svc.unpin_message(message_id, identity.user_id)
    return Response(status_code=204)


@router.get("/channels/{channel_id}/pins", response_model=list[PinnedMessageRead])
async def list_pins(
    channel_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PinService = Depends(_svc),
):
    """All pinned messages in a channel, oldest pin first."""
    return await svc.list_pins(channel_id, identity.user_id)
