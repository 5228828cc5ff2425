"""Reaction routes."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.db.engine import get_db
from huddle.schemas.message import ReactionCreate, ReactionRead, ReactionSummary
from huddle.services.reaction_service import ReactionService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> ReactionService:
    return ReactionService(db)


@router.post(
    "/messages/{message_id}/reactions", response_model=ReactionRead, status_code=201
)
async def add_reaction(
    message_id: int,
    body: ReactionCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ReactionService = Depends(_svc),
):
    return await svc.add_reaction(message_id, identity.user_id, body.emoji)


@router.delete("/messages/{message_id}/reactions/{emoji}", status_code=204)
async def remove_reaction(
    message_id: int,
    emoji: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ReactionService = Depends(_svc),
):
    await svc.remove_reaction(message_id, identity.user_id, emoji)
    return Response(status_code=204)


@router.get(
    "/messages/{message_id}/reactions", response_model=list[ReactionSummary]
)
async def list_reactions(
    message_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ReactionService = Depends(_svc),
):
    """Reactions grouped by emoji with counts."""
    return await svc.summarize(message_id, identity.user_id)
