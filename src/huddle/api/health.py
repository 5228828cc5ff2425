"""Health check endpoint.

Verifies the server is running and reports whether its dependencies
(database, Redis) are reachable, plus how many sockets are subscribed.
"""

from fastapi import APIRouter, Depends
from redis.asyncio import from_url
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from huddle import __version__
from huddle.config import settings
from huddle.db.engine import get_db
from huddle.realtime.registry import registry

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    # Check database
    try:
        await db.execute(text("SELECT 1"))
        checks["postgres"] = "ok"
    except Exception as e:
        checks["postgres"] = f"error: {e}"

    # Check Redis
    try:
        r = from_url(settings.redis_url)
        try:
            await r.ping()
        finally:
            await r.aclose()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    status = "healthy" if all(
        v == "ok" for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {
        "status": status,
        **checks,
        "websocket_connections": registry.connection_count(),
    }
