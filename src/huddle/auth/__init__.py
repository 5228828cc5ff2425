"""Authentication and authorization.

Users authenticate with email/password and receive JWT access/refresh
tokens. The access token resolves to a CurrentIdentity for every
protected route and for the WebSocket upgrade.
"""
