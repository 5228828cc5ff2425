"""Pin service — pin, unpin, and list pinned messages.

A message can be pinned once per workspace. Pins are keyed by
(workspace_id, message_id) so the same lookup serves pin, unpin and the
"already pinned" check.
"""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.db.models import Message, PinnedMessage
from huddle.services.channel_service import ChannelService
from huddle.services.errors import ConflictError, InvalidInputError
from huddle.services.message_service import MessageService

MAX_PIN_REASON = 500


def _already_pinned() -> ConflictError:
    return ConflictError("ALREADY_PINNED", "This message is already pinned")


class PinService:
    """Business logic for pinned messages."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.messages = MessageService(db)
        self.channels = ChannelService(db)

    async def pin_message(
        self, message_id: int, user_id: int, reason: str
    ) -> PinnedMessage:
        if not 1 <= len(reason) <= MAX_PIN_REASON:
            raise InvalidInputError(
                "INVALID_PIN_REASON",
                f"Pin reason must be between 1 and {MAX_PIN_REASON} characters",
            )

        message = await self.messages.get_message(message_id, user_id)
        if await self._is_pinned(message):
            raise _already_pinned()

        pin = PinnedMessage(
            message_id=message.id,
            workspace_id=message.workspace_id,
            pinned_by=user_id,
            pinned_reason=reason,
        )
        self.db.add(pin)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise _already_pinned() from None
        return pin

    async def _is_pinned(self, message: Message) -> bool:
        result = await self.db.execute(
            select(PinnedMessage.id).where(
                PinnedMessage.message_id == message.id,
                PinnedMessage.workspace_id == message.workspace_id,
            )
        )
        return result.first() is not None

    async def unpin_message(self, message_id: int, user_id: int) -> None:
        """Remove a pin. Unpinning a message that is not pinned is fine."""
        message = await self.messages.get_message(message_id, user_id)
        await self.db.execute(
            delete(PinnedMessage).where(
                PinnedMessage.message_id == message.id,
                PinnedMessage.workspace_id == message.workspace_id,
            )
        )
        await self.db.commit()

    async def list_pins(self, channel_id: int, user_id: int) -> list[dict]:
        """Pinned, non-deleted messages in a channel, oldest pin first."""
        await self.channels.get_channel(channel_id, user_id)
        result = await self.db.execute(
            select(Message, PinnedMessage)
            .join(
                PinnedMessage,
                (PinnedMessage.message_id == Message.id)
                & (PinnedMessage.workspace_id == Message.workspace_id),
            )
            .where(Message.channel_id == channel_id, Message.deleted.is_(False))
            .order_by(PinnedMessage.pinned_at, PinnedMessage.id)
        )
        return [
            {
                "message_id": message.id,
                "workspace_id": message.workspace_id,
                "channel_id": message.channel_id,
                "user_id": message.user_id,
                "content": message.content,
                "pin_id": pin.id,
                "pinned_by": pin.pinned_by,
                "pinned_reason": pin.pinned_reason,
                "pinned_at": pin.pinned_at,
            }
            for message, pin in result.all()
        ]
