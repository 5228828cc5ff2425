"""Channel list state kept in sync with workspace events.

ChannelStore holds the channels of one workspace plus the currently
selected channel. It is loaded once from REST and then kept current by
feeding it CHANNEL_* events from the watcher:

- CHANNEL_CREATED appends the channel unless it is already listed
  (the creating client sees both its REST response and the event)
- CHANNEL_UPDATED replaces the listed channel in place
- CHANNEL_ARCHIVED marks it archived and deselects it

Events for channels the store has never seen are ignored for update
and archive.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from huddle.events.types import CHANNEL_ARCHIVED, CHANNEL_CREATED, CHANNEL_UPDATED


class ChannelItem(BaseModel):
    """A channel as the client sees it. Accepts REST rows and event payloads."""

    model_config = ConfigDict(populate_by_name=True)

    channel_id: int = Field(validation_alias=AliasChoices("channelId", "channel_id", "id"))
    workspace_id: int = Field(validation_alias=AliasChoices("workspaceId", "workspace_id"))
    name: str
    description: Optional[str] = None
    topic: Optional[str] = None
    channel_type: str = Field(
        default="PUBLIC", validation_alias=AliasChoices("channelType", "channel_type")
    )
    archived: bool = False
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )


class ChannelStore:
    def __init__(self, workspace_id: Optional[int] = None) -> None:
        self.workspace_id = workspace_id
        self.channels: list[ChannelItem] = []
        self.current: Optional[ChannelItem] = None

    def load(self, channels: Iterable[dict[str, Any]]) -> None:
        """Replace the list with a fresh REST snapshot."""
        self.channels = [ChannelItem.model_validate(c) for c in channels]
        if self.current is not None:
            self.current = self.get(self.current.channel_id)

    def clear(self) -> None:
        self.channels = []
        self.current = None

    def get(self, channel_id: int) -> Optional[ChannelItem]:
        for channel in self.channels:
            if channel.channel_id == channel_id:
                return channel
        return None

    def _index(self, channel_id: int) -> int:
        for i, channel in enumerate(self.channels):
            if channel.channel_id == channel_id:
                return i
        return -1

    def select(self, channel_id: Optional[int]) -> Optional[ChannelItem]:
        self.current = None if channel_id is None else self.get(channel_id)
        return self.current

    def visible(self, show_archived: bool = False) -> list[ChannelItem]:
        if show_archived:
            return list(self.channels)
        return [c for c in self.channels if not c.archived]

    def apply(self, event: dict[str, Any]) -> bool:
        """Fold one workspace event into the store. Returns True if state changed."""
        event_type = event.get("type")
        data = event.get("data") or {}
        if self.workspace_id is not None and event.get("workspaceId") not in (
            None,
            self.workspace_id,
        ):
            return False

        if event_type == CHANNEL_CREATED:
            channel = ChannelItem.model_validate(data)
            if self._index(channel.channel_id) != -1:
                return False
            self.channels.append(channel)
            return True

        if event_type == CHANNEL_UPDATED:
            channel = ChannelItem.model_validate(data)
            i = self._index(channel.channel_id)
            if i == -1:
                return False
            self.channels[i] = channel
            if self.current is not None and self.current.channel_id == channel.channel_id:
                self.current = channel
            return True

        if event_type == CHANNEL_ARCHIVED:
            channel_id = data.get("channelId", data.get("channel_id"))
            i = self._index(channel_id) if channel_id is not None else -1
            if i == -1:
                return False
            self.channels[i] = self.channels[i].model_copy(update={"archived": True})
            if self.current is not None and self.current.channel_id == channel_id:
                self.current = None
            return True

        return False
