"""
Structured logging for the storefront client.

Session events (probe_attempt, probe_failed, fetch_served_samples, ...) are
emitted as snake_case event names with key/value context. They render as
colored console lines in development and as JSON lines elsewhere.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from src.config.settings import get_settings

# Libraries that log one line per HTTP request; a probe cycle over several
# candidates would drown the session's own events
_NOISY_LOGGERS = ("httpx", "httpcore")


def add_client_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Tag every event with the client name and version."""
    settings = get_settings()
    event_dict.setdefault("client", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    if settings.environment != "development":
        event_dict["environment"] = settings.environment
    return event_dict


def configure_logging(log_level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: Overrides the configured level (e.g. "DEBUG" for
            `manage.py --verbose`)
    """
    settings = get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_client_context,
    ]

    if settings.environment == "development":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        processors = shared_processors + [renderer]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Command output goes to stdout, logs stay on stderr
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
