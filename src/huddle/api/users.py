"""User profile routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.db.engine import get_db
from huddle.schemas.user import UserRead, UserUpdate
from huddle.services.user_service import UserService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/users/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.get_user(identity.user_id)


@router.patch("/users/me", response_model=UserRead)
async def update_me(
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Update display name, status message or presence."""
    return await svc.update_profile(
        identity.user_id,
        display_name=body.display_name,
        status_message=body.status_message,
        last_known_presence=body.last_known_presence,
    )


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(user_id: int, svc: UserService = Depends(_svc)):
    return await svc.get_user(user_id)
