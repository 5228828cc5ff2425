"""Connection registry — which sockets are subscribed to which workspace.

A connection belongs to at most one workspace at a time. Registering a
connection that is already subscribed elsewhere moves it.

All bookkeeping is synchronous and runs on the event loop thread, so it
needs no lock: nothing awaits between reading and mutating the maps.
Only broadcast() awaits, and it works on a snapshot.
"""

from typing import Optional, Protocol

import structlog

logger = structlog.get_logger()


class Connection(Protocol):
    """Anything the registry can push text frames to."""

    async def send_text(self, data: str) -> None: ...


class ConnectionRegistry:
    """In-memory map of workspace id -> open connections."""

    def __init__(self) -> None:
        self._by_workspace: dict[int, set[Connection]] = {}
        self._workspace_of: dict[Connection, int] = {}

    def register(self, connection: Connection, workspace_id: int) -> None:
        """Subscribe a connection to a workspace, leaving any previous one."""
        current = self._workspace_of.get(connection)
        if current == workspace_id:
            return
        if current is not None:
            self._discard(connection, current)
        self._by_workspace.setdefault(workspace_id, set()).add(connection)
        self._workspace_of[connection] = workspace_id

    def unregister(self, connection: Connection) -> Optional[int]:
        """Drop a connection. Returns the workspace it was subscribed to, if any."""
        workspace_id = self._workspace_of.pop(connection, None)
        if workspace_id is not None:
            self._discard(connection, workspace_id)
        return workspace_id

    def _discard(self, connection: Connection, workspace_id: int) -> None:
        conns = self._by_workspace.get(workspace_id)
        if conns is None:
            return
        conns.discard(connection)
        if not conns:
            del self._by_workspace[workspace_id]

    def workspace_of(self, connection: Connection) -> Optional[int]:
        return self._workspace_of.get(connection)

    def connection_count(self, workspace_id: Optional[int] = None) -> int:
        if workspace_id is None:
            return len(self._workspace_of)
        return len(self._by_workspace.get(workspace_id, ()))

    def workspaces(self) -> list[int]:
        return sorted(self._by_workspace)

    async def broadcast(self, workspace_id: int, payload: str) -> int:
        """Send a serialised event to every connection in a workspace.

        Returns the number of connections the frame was handed to.
        A connection whose send fails is unregistered and skipped; the
        failure never propagates to the caller.
        """
        delivered = 0
        for connection in list(self._by_workspace.get(workspace_id, ())):
            # May have disconnected or moved while an earlier send was awaited.
            if self._workspace_of.get(connection) != workspace_id:
                continue
            try:
                await connection.send_text(payload)
            except Exception as e:
                self.unregister(connection)
                logger.debug(
                    "huddle.ws.send_dropped",
                    workspace_id=workspace_id,
                    error=str(e) or type(e).__name__,
                )
            else:
                delivered += 1
        return delivered

    def clear(self) -> None:
        self._by_workspace.clear()
        self._workspace_of.clear()


# Process-wide registry used by the /ws endpoint and publish_event()
registry = ConnectionRegistry()
