"""Reaction service — emoji reactions on messages."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.db.models import Reaction
from huddle.services.errors import ConflictError, NotFoundError
from huddle.services.message_service import MessageService


def _already_reacted() -> ConflictError:
    return ConflictError("ALREADY_REACTED", "You already reacted with this emoji")


class ReactionService:
    """Business logic for reactions. One (user, emoji) pair per message."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.messages = MessageService(db)

    async def _find(self, message_id: int, user_id: int, emoji: str):
        result = await self.db.execute(
            select(Reaction).where(
                Reaction.message_id == message_id,
                Reaction.user_id == user_id,
                Reaction.emoji == emoji,
            )
        )
        return result.scalars().first()

    async def add_reaction(self, message_id: int, user_id: int, emoji: str) -> Reaction:
        await self.messages.get_message(message_id, user_id)
        if await self._find(message_id, user_id, emoji):
            raise _already_reacted()
        reaction = Reaction(message_id=message_id, user_id=user_id, emoji=emoji)
        self.db.add(reaction)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise _already_reacted() from None
        return reaction

    async def remove_reaction(self, message_id: int, user_id: int, emoji: str) -> None:
        await self.messages.get_message(message_id, user_id)
        reaction = await self._find(message_id, user_id, emoji)
        if not reaction:
            raise NotFoundError("REACTION_NOT_FOUND", "Reaction not found")
        await self.db.delete(reaction)
        await self.db.commit()

    async def summarize(self, message_id: int, user_id: int) -> list[dict]:
        """Group reactions by emoji, in order of first use."""
        await self.messages.get_message(message_id, user_id)
        result = await self.db.execute(
            select(Reaction)
            .where(Reaction.message_id == message_id)
            .order_by(Reaction.created_at, Reaction.id)
        )
        grouped: dict[str, list[int]] = {}
        for reaction in result.scalars().all():
            grouped.setdefault(reaction.emoji, []).append(reaction.user_id)
        return [
            {"emoji": emoji, "count": len(user_ids), "user_ids": user_ids}
            for emoji, user_ids in grouped.items()
        ]
