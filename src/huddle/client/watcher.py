"""Reconnecting WebSocket client for one workspace's event stream.

WorkspaceWatcher connects to /ws?workspaceId=<id>&token=<jwt> with
aiohttp and routes each event to a callback:

- CHANNEL_CREATED / CHANNEL_UPDATED / CHANNEL_ARCHIVED -> on_channel_event
- MESSAGE_CREATED -> on_message_event
- PONG updates last_pong (answers to ping())
- CONNECTED and unknown types are logged and dropped

When the connection drops it reconnects with exponential backoff. The
server's rejection close codes (bad workspace id, auth, not found, not
a member) end the watcher with WatcherRejected, since retrying cannot
succeed. stop() ends it cleanly with a normal closure.
"""

import asyncio
import inspect
import json
import random
from typing import Any, Awaitable, Callable, Optional, Union

import aiohttp
import structlog

from huddle.events.types import (
    CHANNEL_EVENT_TYPES,
    CLOSE_NORMAL,
    MESSAGE_EVENT_TYPES,
    PING,
    PONG,
    REJECTION_CLOSE_CODES,
)

logger = structlog.get_logger()

EventCallback = Callable[[dict[str, Any]], Union[None, Awaitable[None]]]


class WatcherRejected(Exception):
    """The server refused the subscription; reconnecting will not help."""

    def __init__(self, close_code: int, reason: str = ""):
        super().__init__(f"WebSocket rejected with code {close_code}: {reason}")
        self.close_code = close_code
        self.reason = reason


def backoff_delay(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = False,
) -> float:
    """Seconds to wait before reconnect attempt number `attempt` (0-based)."""
    delay = min(max_delay, base_delay * (2 ** attempt))
    if jitter:
        delay = random.uniform(delay / 2, delay)
    return delay


def ws_url(base_url: str) -> str:
    """Turn an http(s) API base URL into the ws(s) endpoint URL."""
    base = base_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return f"{base}/ws"


class WorkspaceWatcher:
    def __init__(
        self,
        base_url: str,
        workspace_id: int,
        token: Optional[str] = None,
        on_channel_event: Optional[EventCallback] = None,
        on_message_event: Optional[EventCallback] = None,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: bool = True,
        max_retries: Optional[int] = None,
        heartbeat: Optional[float] = 30.0,
    ):
        self.url = ws_url(base_url)
        self.workspace_id = workspace_id
        self.token = token
        self.on_channel_event = on_channel_event
        self.on_message_event = on_message_event
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.max_retries = max_retries
        self.heartbeat = heartbeat

        self.attempt = 0
        self.connected = False
        self.last_pong: Optional[float] = None
        self._stopping = False
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    @property
    def params(self) -> dict[str, str]:
        params = {"workspaceId": str(self.workspace_id)}
        if self.token:
            params["token"] = self.token
        return params

    async def stop(self) -> None:
        """Close the socket with a normal closure and do not reconnect."""
        self._stopping = True
        if self._ws is not None and not self._ws.closed:
            await self._ws.close(code=CLOSE_NORMAL, message=b"Client stopped")

    async def ping(self) -> None:
        """Send a PING; the server's PONG sets last_pong."""
        if self._ws is not None and not self._ws.closed:
            await self._ws.send_str(json.dumps({"type": PING}))

    async def dispatch(self, text: str) -> Optional[str]:
        """Route one text frame. Returns the event type, or None if dropped."""
        try:
            event = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("huddle.watcher.bad_frame", frame=text[:200])
            return None
        if not isinstance(event, dict):
            return None

        event_type = event.get("type")
        if event_type in CHANNEL_EVENT_TYPES:
            callback = self.on_channel_event
        elif event_type in MESSAGE_EVENT_TYPES:
            callback = self.on_message_event
        elif event_type == PONG:
            self.last_pong = asyncio.get_running_loop().time()
            return event_type
        else:
            logger.debug("huddle.watcher.control", type=event_type)
            return event_type

        if callback is not None:
            result = callback(event)
            if inspect.isawaitable(result):
                await result
        return event_type

    async def _listen(self, session: aiohttp.ClientSession) -> Optional[int]:
        """One connection lifetime. Returns the close code the server sent."""
        async with session.ws_connect(
            self.url, params=self.params, heartbeat=self.heartbeat
        ) as ws:
            self._ws = ws
            self.connected = True
            self.attempt = 0
            logger.info("huddle.watcher.connected", workspace_id=self.workspace_id)
            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        await self.dispatch(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.warning(
                            "huddle.watcher.socket_error", error=str(ws.exception())
                        )
                        break
            finally:
                self.connected = False
                self._ws = None
            return ws.close_code

    async def run(self, session: Optional[aiohttp.ClientSession] = None) -> None:
        """Connect and keep reconnecting until stop(), rejection, or max_retries."""
        if self.workspace_id <= 0:
            logger.info("huddle.watcher.skipped", workspace_id=self.workspace_id)
            return

        self._stopping = False
        own_session = session is None
        if own_session:
            session = aiohttp.ClientSession()
        try:
            while not self._stopping:
                close_code: Optional[int] = None
                try:
                    close_code = await self._listen(session)
                except (aiohttp.ClientError, OSError) as e:
                    logger.warning(
                        "huddle.watcher.connect_failed",
                        workspace_id=self.workspace_id,
                        attempt=self.attempt,
                        error=str(e) or type(e).__name__,
                    )

                if close_code in REJECTION_CLOSE_CODES:
                    logger.warning(
                        "huddle.watcher.rejected",
                        workspace_id=self.workspace_id,
                        code=close_code,
                    )
                    raise WatcherRejected(close_code)
                if self._stopping:
                    break
                if self.max_retries is not None and self.attempt >= self.max_retries:
                    logger.warning(
                        "huddle.watcher.gave_up",
                        workspace_id=self.workspace_id,
                        attempts=self.attempt,
                    )
                    break

                delay = backoff_delay(
                    self.attempt, self.base_delay, self.max_delay, self.jitter
                )
                logger.info(
                    "huddle.watcher.reconnecting",
                    workspace_id=self.workspace_id,
                    close_code=close_code,
                    delay=round(delay, 2),
                )
                self.attempt += 1
                await asyncio.sleep(delay)
        finally:
            if own_session:
                await session.close()
