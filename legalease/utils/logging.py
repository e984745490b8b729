"""
Structured logging configuration using structlog.

JSON lines in production, colored console output during development. The
standard library root logger is pointed at the same stream so that messages
from the Gemini router and third-party libraries end up alongside the
structlog events.
"""

import logging
import sys
from typing import Optional

import structlog


# Libraries that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "PIL", "google", "multipart")


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON logs (for production)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: Optional[str] = None):
    """Get a structlog logger, bound to a component name if given."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(component=name)
    return logger
