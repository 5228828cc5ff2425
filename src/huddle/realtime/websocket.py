"""WebSocket endpoint — workspace event delivery to connected clients.

Each client connects to /ws?workspaceId=<id>&token=<JWT>. The handler:
1. Validates the workspace id and authenticates the token
2. Checks that the workspace exists and the user is a member
3. Registers the socket with the ConnectionRegistry and acknowledges
   with a CONNECTED frame
4. Answers PING frames until the client goes away, then unregisters

This is a long-lived connection — one per workspace per browser tab.
Switching workspaces means closing this socket and opening another.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.auth.jwt import TokenError, user_id_from_token
from huddle.config import settings
from huddle.db.engine import get_db
from huddle.events.types import (
    CLOSE_BAD_REQUEST,
    CLOSE_FORBIDDEN,
    CLOSE_NOT_FOUND,
    CLOSE_UNAUTHORIZED,
    CONNECTED,
    PING,
    PONG,
)
from huddle.realtime.registry import registry
from huddle.schemas.events import WorkspaceEvent
from huddle.services.errors import ForbiddenError, NotFoundError
from huddle.services.workspace_service import WorkspaceService

logger = structlog.get_logger()
router = APIRouter()


@dataclass(eq=False)
class ClientConnection:
    """One accepted socket, as seen by the registry (hashed by identity)."""

    websocket: WebSocket
    workspace_id: int
    user_id: Optional[int] = None
    frames_sent: int = field(default=0)

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)
        self.frames_sent += 1

    async def send_event(self, event_type: str, data: Optional[dict[str, Any]] = None) -> None:
        event = WorkspaceEvent(
            type=event_type, workspace_id=self.workspace_id, data=data or {}
        )
        await self.send_text(event.to_json())


def parse_workspace_id(raw: Optional[str]) -> Optional[int]:
    """Positive integer or None."""
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


async def _authorize(
    websocket: WebSocket, db: AsyncSession, workspace_id: int
) -> tuple[bool, Optional[int]]:
    """Run the upgrade checks. Closes the socket and returns (False, None) on rejection."""
    token = websocket.query_params.get("token")
    user_id: Optional[int] = None

    if token:
        try:
            user_id = user_id_from_token(token)
        except TokenError:
            await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Invalid or expired token")
            return False, None
    elif settings.websocket_auth_required:
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Authentication required")
        return False, None

    try:
        await WorkspaceService(db).get_subscribable_workspace(workspace_id, user_id)
    except NotFoundError as e:
        await websocket.close(code=CLOSE_NOT_FOUND, reason=e.message)
        return False, None
    except ForbiddenError as e:
        await websocket.close(code=CLOSE_FORBIDDEN, reason=e.message)
        return False, None
    finally:
        # Release the DB connection; the socket may stay open for hours.
        await db.close()

    return True, user_id


async def _handle_client_frame(conn: ClientConnection, text: Optional[str]) -> None:
    """Client → server frames. Only PING is understood; the rest is ignored."""
    if not text:
        return
    try:
        msg = json.loads(text)
    except json.JSONDecodeError:
        return
    if isinstance(msg, dict) and str(msg.get("type", "")).upper() == PING:
        await conn.send_event(PONG)


@router.websocket("/ws")
async def workspace_websocket(websocket: WebSocket, db: AsyncSession = Depends(get_db)):
    """WebSocket endpoint for real-time workspace events.

    Authentication: JWT access token as ?token= query param. Outside
    development (or with HUDDLE_WS_REQUIRE_AUTH=true) the token is
    mandatory. Rejections close with an application code (4001, 4003,
    4004, 4400) that tells the client not to retry.
    The socket is accepted first; rejections arrive as close frames.
    """
    await websocket.accept()

    workspace_id = parse_workspace_id(websocket.query_params.get("workspaceId"))
    if workspace_id is None:
        await websocket.close(
            code=CLOSE_BAD_REQUEST, reason="workspaceId must be a positive integer"
        )
        return

    allowed, user_id = await _authorize(websocket, db, workspace_id)
    if not allowed:
        return

    # ── Subscription accepted ───────────────────────────────
    conn = ClientConnection(websocket=websocket, workspace_id=workspace_id, user_id=user_id)
    registry.register(conn, workspace_id)
    logger.info(
        "huddle.ws.connected",
        workspace_id=workspace_id,
        user_id=user_id,
        connections=registry.connection_count(workspace_id),
    )

    try:
        await conn.send_event(
            CONNECTED, {"connections": registry.connection_count(workspace_id)}
        )
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            await _handle_client_frame(conn, message.get("text"))
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(conn)
        logger.info(
            "huddle.ws.disconnected",
            workspace_id=workspace_id,
            user_id=user_id,
            frames_sent=conn.frames_sent,
        )
