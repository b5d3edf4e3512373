"""structlog setup for FeedGate.

Development gets colored console lines; every other environment gets one
JSON object per line. Request-scoped values (the correlation id) travel
through contextvars, so any logger used while serving a request picks
them up.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from feedgate.core.config import Settings, get_settings

# Never let these reach a log line, whatever a caller passes in.
REDACTED_KEYS = frozenset({"password", "password_hash", "token", "authorization", "secret_key"})

THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Move the name given to ``get_logger`` into the ``logger`` key."""
    event_dict["logger"] = event_dict.pop("logger_name", None) or "feedgate"
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential-bearing keys in a log entry."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """JSON output names the log text ``message`` rather than ``event``."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Install the processor chain and route stdlib logging through stdout.

    Safe to call more than once; the last call wins.

    Args:
        settings: Source of ``log_level``, ``log_format`` and the environment.
            Defaults to ``get_settings()``.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_secrets,
    ]

    if settings.is_development or settings.log_format == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)
        )
    else:
        processors.extend(
            [rename_message_field, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a logger whose entries carry ``logger=<name>``.

    The name rides along as an initial value; processors are resolved on
    each call, so loggers created at import time follow ``configure_logging``.
    """
    return structlog.get_logger(logger_name=name or "feedgate")


def bind_correlation_id(correlation_id: str) -> None:
    """Attach a correlation id to every entry logged in the current context.

    The request middleware calls this with the incoming ``X-Correlation-ID``
    header or a freshly generated id.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
