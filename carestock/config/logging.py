"""
Structured logging configuration using structlog.

Ledger events carry item and subject ids and evaluation dates; the
processors below render those consistently so a pool can be followed
across the ledger, forecasts and alerts:

    movement_recorded  item_id=gauze subject_id=r1 pool=gauze@r1
    forecast_computed  item_id=gauze subject_id=None pool=gauze@facility

Development uses colored console output, other environments JSON.
"""

import logging
import sys
from datetime import date
from typing import Any

import structlog
from structlog.types import Processor

from carestock.config.settings import get_settings

# Libraries that log per statement or per request at INFO
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application context to log events."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def add_pool_label(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Label the stock pool an event refers to, facility when no subject."""
    item_id = event_dict.get("item_id")
    if item_id and "pool" not in event_dict:
        owner = event_dict.get("subject_id") or "facility"
        event_dict["pool"] = f"{item_id}@{owner}"
    return event_dict


def isoformat_dates(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render date values (as_of, movement dates) as ISO strings."""
    for key, value in event_dict.items():
        if isinstance(value, date):
            event_dict[key] = value.isoformat()
    return event_dict


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger from settings."""
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        add_pool_label,
        isoformat_dates,
    ]

    if settings.environment == "development":
        renderer: list[Processor] = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
