"""Channel service — channel lifecycle plus realtime notification.

Every successful create / update / archive is committed first and then
broadcast to the workspace, so connected clients can update their
channel list without polling:

  POST   /channels       → CHANNEL_CREATED
  PATCH  /channels/:id   → CHANNEL_UPDATED
  DELETE /channels/:id   → CHANNEL_ARCHIVED
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.db.models import Channel
from huddle.events.types import CHANNEL_ARCHIVED, CHANNEL_CREATED, CHANNEL_UPDATED
from huddle.realtime.pubsub import publish_event
from huddle.schemas.events import ChannelEventData
from huddle.services.errors import ConflictError, InvalidInputError, NotFoundError
from huddle.services.workspace_service import WorkspaceService

logger = structlog.get_logger()


def channel_not_found() -> NotFoundError:
    return NotFoundError("CHANNEL_NOT_FOUND", "The specified channel does not exist")


def channel_name_taken(name: str) -> ConflictError:
    return ConflictError(
        "CHANNEL_NAME_TAKEN",
        f"A channel named '{name}' already exists in this workspace",
    )


class ChannelService:
    """Business logic for channels."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.workspaces = WorkspaceService(db)

    async def _name_taken(
        self, workspace_id: int, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        q = select(Channel.id).where(
            Channel.workspace_id == workspace_id, Channel.name == name
        )
        if exclude_id is not None:
            q = q.where(Channel.id != exclude_id)
        result = await self.db.execute(q)
        return result.first() is not None

    async def _publish(self, event_type: str, channel: Channel) -> None:
        await publish_event(
            channel.workspace_id,
            event_type,
            ChannelEventData.from_channel(channel).to_wire(),
        )

    # ─── Queries ────────────────────────────────────────

    async def list_channels(
        self, workspace_id: int, user_id: int, include_archived: bool = False
    ) -> list[Channel]:
        await self.workspaces.require_member(workspace_id, user_id)
        q = select(Channel).where(Channel.workspace_id == workspace_id)
        if not include_archived:
            q = q.where(Channel.archived.is_(False))
        result = await self.db.execute(q.order_by(Channel.name))
        return list(result.scalars().all())

    async def get_channel(self, channel_id: int, user_id: int) -> Channel:
        channel = await self.db.get(Channel, channel_id)
        if not channel:
            raise channel_not_found()
        await self.workspaces.require_member(channel.workspace_id, user_id)
        return channel

    # ─── Mutations ──────────────────────────────────────

    async def create_channel(
        self,
        user_id: int,
        workspace_id: int,
        name: str,
        channel_type: str = "PUBLIC",
        description: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> Channel:
        """Create a channel and announce it to the workspace."""
        await self.workspaces.require_member(workspace_id, user_id)

        if await self._name_taken(workspace_id, name):
            raise channel_name_taken(name)

        channel = Channel(
            workspace_id=workspace_id,
            name=name,
            channel_type=channel_type,
            description=description,
            topic=topic,
            archived=False,
        )
        self.db.add(channel)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent create took the name after our check
            await self.db.rollback()
            raise channel_name_taken(name) from None

        logger.info(
            "huddle.channel.created",
            channel_id=channel.id,
            workspace_id=workspace_id,
            user_id=user_id,
        )
        await self._publish(CHANNEL_CREATED, channel)
        return channel

    async def update_channel(
        self,
        channel_id: int,
        user_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> Channel:
        """Partially update a channel. None means "leave as is"."""
        channel = await self.get_channel(channel_id, user_id)
        if channel.archived:
            raise InvalidInputError(
                "CHANNEL_ARCHIVED", "Archived channels cannot be modified"
            )

        if name is not None and name != channel.name:
            if await self._name_taken(channel.workspace_id, name, exclude_id=channel.id):
                raise channel_name_taken(name)
            channel.name = name
        if description is not None:
            channel.description = description
        if topic is not None:
            channel.topic = topic

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise channel_name_taken(name) from None
        await self._publish(CHANNEL_UPDATED, channel)
        return channel

    async def archive_channel(self, channel_id: int, user_id: int) -> Channel:
        """Soft-delete a channel. Archiving twice is a no-op (no second event)."""
        channel = await self.get_channel(channel_id, user_id)
        if channel.archived:
            return channel

        channel.archived = True
        await self.db.commit()

        logger.info(
            "huddle.channel.archived",
            channel_id=channel.id,
            workspace_id=channel.workspace_id,
            user_id=user_id,
        )
        await self._publish(CHANNEL_ARCHIVED, channel)
        return channel
