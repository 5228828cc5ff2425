"""WebSocket event envelopes.

Everything pushed over /ws has the shape {"type", "workspaceId", "data"}.
The wire format is camelCase (it is consumed by browser clients); the
Python side keeps snake_case field names and serialises by alias.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from huddle.db.models import Channel, Message


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class WorkspaceEvent(_WireModel):
    type: str
    workspace_id: int
    data: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ChannelEventData(_WireModel):
    channel_id: int
    workspace_id: int
    name: str
    description: Optional[str] = None
    topic: Optional[str] = None
    channel_type: str
    is_private: bool
    archived: bool
    created_at: datetime

    @classmethod
    def from_channel(cls, channel: Channel) -> "ChannelEventData":
        return cls(
            channel_id=channel.id,
            workspace_id=channel.workspace_id,
            name=channel.name,
            description=channel.description,
            topic=channel.topic,
            channel_type=channel.channel_type,
            is_private=channel.channel_type == "PRIVATE",
            archived=channel.archived,
            created_at=channel.created_at,
        )


class MessageEventData(_WireModel):
    message_id: int
    channel_id: int
    workspace_id: int
    user_id: int
    content: str
    parent_message_id: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageEventData":
        return cls(
            message_id=message.id,
            channel_id=message.channel_id,
            workspace_id=message.workspace_id,
            user_id=message.user_id,
            content=message.content,
            parent_message_id=message.parent_message_id,
            created_at=message.created_at,
        )
