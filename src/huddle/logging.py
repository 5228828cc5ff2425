"""structlog configuration.

Every module does `logger = structlog.get_logger()` and logs dotted
event names with keyword context. Request-scoped values (request_id)
arrive through structlog's contextvars, bound by RequestIdMiddleware.
"""

import logging

import structlog

from huddle.config import settings


def configure_logging() -> None:
    """Install the processor chain. Safe to call more than once."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
