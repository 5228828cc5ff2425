"""Huddle — team messaging backend.

Workspaces, channels, messages, pins and reactions over a relational
schema, with a WebSocket layer that pushes channel and message events
to every client connected to a workspace.
"""

__version__ = "0.1.0"
