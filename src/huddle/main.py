"""FastAPI application factory.

create_app() returns a configured FastAPI instance. The lifespan handles
Redis and the database engine; middleware, error handlers and routers
(REST under /api/v1 plus the /ws endpoint) are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from huddle import __version__
from huddle.api import api_router
from huddle.cache import close_redis, init_redis
from huddle.config import settings
from huddle.db.engine import engine
from huddle.logging import configure_logging
from huddle.middleware.rate_limit import RateLimitMiddleware
from huddle.middleware.request_id import RequestIdMiddleware
from huddle.middleware.security import SecurityHeadersMiddleware
from huddle.realtime.registry import registry
from huddle.realtime.websocket import router as ws_router
from huddle.services.errors import ServiceError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "huddle.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("huddle.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Optional: only rate limiting depends on Redis
        logger.warning("huddle.redis_unavailable", error=str(e))

    yield

    logger.info(
        "huddle.shutdown", open_connections=registry.connection_count()
    )
    registry.clear()
    await close_redis()
    await engine.dispose()


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info(
        "huddle.request.rejected",
        code=exc.code,
        status=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "huddle.request.failed",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Huddle",
        description="Team messaging: workspaces, channels, messages and live channel events",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Error handlers ────────────────────────────────────────
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: huddle.main:app)
app = create_app()
