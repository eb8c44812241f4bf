"""
Module: logger.py
Description: structlog setup shared by the delivery queue, the collector and the CLI.

Every record is one JSON object per line with "event", "timestamp" (UTC,
Z suffix) and "level" keys plus whatever key/value context the caller
binds, e.g. action, queued_count or endpoint.

configure_logging() runs once at import with settings.log_level. It can
be called again to change the level or to turn off logger caching, which
tests need because captured stdout streams are swapped between tests.

Dependencies: structlog, logging, datetime
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import structlog

from actionlog.config.settings import settings


def _stamp_utc(logger, method_name, event_dict):
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def _stamp_level(logger, method_name, event_dict):
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(level: Optional[str] = None, cache: bool = True) -> None:
    """
    Apply the shipper's structlog configuration.

    Args:
        level: Minimum level name (DEBUG, INFO, ...); defaults to settings.log_level
        cache: Bind each logger to its output stream on first use. Pass False
            when sys.stdout may be replaced later (pytest capture), so every
            call writes to the stream that is current at that moment.
    """
    level_name = (level or settings.log_level).upper()
    structlog.configure(
        processors=[
            _stamp_utc,
            _stamp_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
        cache_logger_on_first_use=cache,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger for one module, used as `logger = get_logger(__name__)`.

    Example:
        >>> get_logger(__name__).info("Log entry queued", action="page_visit", queued_count=3)
        {"action": "page_visit", "queued_count": 3, "event": "Log entry queued", "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)


configure_logging()
