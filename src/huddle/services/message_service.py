"""Message service — posting, reading, editing and soft-deleting messages.

New messages are broadcast to the workspace as MESSAGE_CREATED after
commit. Edits and deletes are author-only; a deleted message keeps its
row (deleted=True) so threads and pins that reference it stay valid.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.db.models import Message
from huddle.events.types import MESSAGE_CREATED
from huddle.realtime.pubsub import publish_event
from huddle.schemas.events import MessageEventData
from huddle.services.channel_service import ChannelService
from huddle.services.errors import ForbiddenError, InvalidInputError, NotFoundError
from huddle.services.workspace_service import WorkspaceService

logger = structlog.get_logger()


def message_not_found() -> NotFoundError:
    return NotFoundError("MESSAGE_NOT_FOUND", "Message not found")


class MessageService:
    """Business logic for channel messages."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.channels = ChannelService(db)
        self.workspaces = WorkspaceService(db)

    async def get_message(self, message_id: int, user_id: int) -> Message:
        """Fetch a live (not deleted) message the user can see."""
        message = await self.db.get(Message, message_id)
        if not message or message.deleted:
            raise message_not_found()
        await self.workspaces.require_member(message.workspace_id, user_id)
        return message

    async def list_messages(
        self,
        channel_id: int,
        user_id: int,
        limit: int = 50,
        before: Optional[int] = None,
    ) -> list[Message]:
        """Newest first. `before` is a message id cursor for older pages."""
        await self.channels.get_channel(channel_id, user_id)
        q = select(Message).where(
            Message.channel_id == channel_id, Message.deleted.is_(False)
        )
        if before is not None:
            q = q.where(Message.id < before)
        result = await self.db.execute(q.order_by(Message.id.desc()).limit(limit))
        return list(result.scalars().all())

    async def create_message(
        self,
        channel_id: int,
        user_id: int,
        content: str,
        parent_message_id: Optional[int] = None,
    ) -> Message:
        channel = await self.channels.get_channel(channel_id, user_id)
        if channel.archived:
            raise InvalidInputError(
                "CHANNEL_ARCHIVED", "Cannot post to an archived channel"
            )

        if parent_message_id is not None:
            parent = await self.db.get(Message, parent_message_id)
            if not parent or parent.deleted or parent.channel_id != channel.id:
                raise NotFoundError(
                    "MESSAGE_NOT_FOUND", "Parent message not found in this channel"
                )

        message = Message(
            workspace_id=channel.workspace_id,
            channel_id=channel.id,
            user_id=user_id,
            parent_message_id=parent_message_id,
            content=content,
            deleted=False,
        )
        self.db.add(message)
        await self.db.commit()

        await publish_event(
            message.workspace_id,
            MESSAGE_CREATED,
            MessageEventData.from_message(message).to_wire(),
        )
        return message

    async def _own_message(self, message_id: int, user_id: int) -> Message:
        message = await self.get_message(message_id, user_id)
        if message.user_id != user_id:
            raise ForbiddenError(
                "NOT_MESSAGE_AUTHOR", "Only the author can modify this message"
            )
        return message

    async def update_message(
        self, message_id: int, user_id: int, content: str
    ) -> Message:
        message = await self._own_message(message_id, user_id)
        message.content = content
        await self.db.commit()
        return message

    async def delete_message(self, message_id: int, user_id: int) -> None:
        message = await self._own_message(message_id, user_id)
        message.deleted = True
        await self.db.commit()
        logger.info(
            "huddle.message.deleted",
            message_id=message.id,
            channel_id=message.channel_id,
        )
