"""
SummerEase - Logging
====================

structlog renders every record, including those of modules logging through
``logging.getLogger(__name__)``. The signed-in user and the summary being
stored are attached to each record while bound.

Environment Variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    LOG_FORMAT: json, console (default: json in production, console otherwise)
    ENVIRONMENT: "production" or "staging" switches the default to json
"""

import logging
import logging.config
import os
from contextvars import ContextVar
from typing import List, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from summerease import __version__

user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)
summary_id_var: ContextVar[Optional[str]] = ContextVar("summary_id", default=None)

_QUIET_LOGGERS = ("asyncpg", "asyncio", "urllib3", "google")


def add_session_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Attach the bound user and summary ids."""
    user_id = user_id_var.get()
    if user_id:
        event_dict["user_id"] = user_id

    summary_id = summary_id_var.get()
    if summary_id:
        event_dict["summary_id"] = summary_id

    return event_dict


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    event_dict["service"] = "summerease"
    event_dict["version"] = __version__
    return event_dict


def _wants_json() -> bool:
    log_format = os.getenv("LOG_FORMAT", "").lower()
    if log_format in ("json", "console"):
        return log_format == "json"
    return os.getenv("ENVIRONMENT", "development").lower() in ("production", "prod", "staging")


def configure_logging(
    json_output: Optional[bool] = None,
    log_level: Optional[str] = None
) -> None:
    """
    Configure structlog and route standard library loggers through it.

    Args:
        json_output: JSON lines if True, coloured console if False, from the
            environment if None.
        log_level: Minimum level. Defaults to LOG_LEVEL.
    """
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if json_output is None:
        json_output = _wants_json()

    shared_processors: List[Processor] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        add_session_context,
        add_service_info,
    ]

    if json_output:
        shared_processors.extend([
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
        ])
        renderer: Processor = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level, logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "structlog",
            },
        },
        "loggers": {
            "": {"handlers": ["default"], "level": log_level},
            **{name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
        },
    })

    logging.getLogger(__name__).info(
        f"Logging configured ({'json' if json_output else 'console'}, {log_level})"
    )


def bind_user(user_id: Optional[str]) -> None:
    """Bind the user id to the current context (None clears it)."""
    user_id_var.set(user_id)


def bind_summary(summary_id: Optional[str]) -> None:
    summary_id_var.set(summary_id)
