"""
Structured logging for the analysis service.

Every JSON record carries `event_type`, `level`, an ISO-8601 UTC `timestamp`,
the emitting `logger` and the key/value context of the call site
(address, step_id, provider, duration_ms, ...). Addresses are logged
truncated; detectors bind the analyzed address once with bind_address().

LOG_LEVEL and LOG_FORMAT (`json` or `console`) are read when
configure_structlog() runs, once on first import.

Uses only Python stdlib logging and structlog; no backend_sivic imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

ADDRESS_LOG_CHARS = 16


def _level_from_env() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _rename_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """JSON records name the event `event_type`; `message` mirrors it."""
    event = event_dict.pop("event", None)
    if event is not None:
        event_dict.setdefault("event_type", event)
        event_dict.setdefault("message", str(event))
    return event_dict


def configure_structlog(level: int | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog for the process.

    JSON output renders exceptions as structured tracebacks; console output
    keeps structlog's own `event` column and pretty exceptions.
    """
    fmt = (fmt or os.getenv("LOG_FORMAT", "json")).strip().lower()
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json":
        processors += [
            structlog.processors.dict_tracebacks,
            _rename_event,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            level if level is not None else _level_from_env()
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("detector_step_complete", address=short_address(addr), step_id="holders", duration_ms=84)
    """
    return structlog.get_logger(name).bind(logger=name)


def short_address(address: str) -> str:
    if len(address) <= ADDRESS_LOG_CHARS:
        return address
    return address[:ADDRESS_LOG_CHARS] + "..."


def bind_address(logger: structlog.BoundLogger, address: str) -> structlog.BoundLogger:
    """`logger` with the truncated analyzed address bound to every call."""
    return logger.bind(address=short_address(address))
