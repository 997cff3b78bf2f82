"""Logging configuration for the Storefront domain."""

import logging
import os

import structlog

_configured = False


def configure_logging(level=None):
    """Configure structlog and the stdlib root logger once per process.

    Renders JSON lines in production and colored key/value output elsewhere.
    """
    global _configured
    if _configured:
        return

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    if os.environ.get("PROTEAN_ENV") == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    logging.basicConfig(format="%(message)s", level=log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str):
    return structlog.get_logger(name)
