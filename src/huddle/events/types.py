"""Event type constants.

Centralizing event types as constants prevents typos and makes it easy
to discover every event the WebSocket layer can emit. The values are the
literal `type` strings clients switch on.
"""

# ─── Channel lifecycle ───────────────────────────────────

CHANNEL_CREATED = "CHANNEL_CREATED"
CHANNEL_UPDATED = "CHANNEL_UPDATED"
CHANNEL_ARCHIVED = "CHANNEL_ARCHIVED"

CHANNEL_EVENT_TYPES = frozenset({CHANNEL_CREATED, CHANNEL_UPDATED, CHANNEL_ARCHIVED})

# ─── Messages ────────────────────────────────────────────

MESSAGE_CREATED = "MESSAGE_CREATED"

MESSAGE_EVENT_TYPES = frozenset({MESSAGE_CREATED})

# ─── Connection control ──────────────────────────────────

CONNECTED = "CONNECTED"
PING = "PING"
PONG = "PONG"

# ─── WebSocket close codes (4000-4999 are application-defined) ─

CLOSE_NORMAL = 1000
CLOSE_UNAUTHORIZED = 4001  # token missing, invalid or expired
CLOSE_FORBIDDEN = 4003  # authenticated but not a workspace member
CLOSE_NOT_FOUND = 4004  # workspace does not exist or is archived
CLOSE_BAD_REQUEST = 4400  # workspaceId missing or malformed

REJECTION_CLOSE_CODES = frozenset(
    {CLOSE_UNAUTHORIZED, CLOSE_FORBIDDEN, CLOSE_NOT_FOUND, CLOSE_BAD_REQUEST}
)
