"""Event publishing — services -> registry -> WebSocket clients.

Fire-and-forget: if nobody in the workspace is connected, the event is
lost. That is fine for live UI updates (clients can always re-fetch
over REST to catch up).
"""

from typing import Any

import structlog

from huddle.realtime.registry import registry
from huddle.schemas.events import WorkspaceEvent

logger = structlog.get_logger()


async def publish_event(
    workspace_id: int,
    event_type: str,
    data: dict[str, Any],
) -> int:
    """Broadcast an event to everyone connected to a workspace.

    Every service calls this after its database commit, never before,
    so clients are only told about state that is already durable.
    Returns the number of connections that received the event.
    """
    event = WorkspaceEvent(type=event_type, workspace_id=workspace_id, data=data)
    delivered = await registry.broadcast(workspace_id, event.to_json())
    logger.debug(
        "huddle.event.published",
        type=event_type,
        workspace_id=workspace_id,
        delivered=delivered,
    )
    return delivered
