"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
open (no auth required); auth guards its own protected endpoints.
"""

from fastapi import APIRouter, Depends

from huddle.api.auth import router as auth_router
from huddle.api.channels import router as channels_router
from huddle.api.health import router as health_router
from huddle.api.messages import router as messages_router
from huddle.api.pins import router as pins_router
from huddle.api.reactions import router as reactions_router
from huddle.api.users import router as users_router
from huddle.api.workspaces import router as workspaces_router
from huddle.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid access token
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(workspaces_router, tags=["workspaces", "members"], dependencies=_auth)
api_router.include_router(channels_router, tags=["channels"], dependencies=_auth)
api_router.include_router(messages_router, tags=["messages"], dependencies=_auth)
api_router.include_router(pins_router, tags=["pins"], dependencies=_auth)
api_router.include_router(reactions_router, tags=["reactions"], dependencies=_auth)
