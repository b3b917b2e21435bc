"""Structured logging for webhost.

structlog, rendered as one JSON object per line on stdout (or a coloured
console line when ``JSON_LOGS=false``). Every entry carries ``service``,
an ISO-8601 UTC ``timestamp`` and ``level``.

Request-scoped fields are bound with :func:`request_context`, which the
security headers middleware enters around each request; anything logged
further down the stack (static delivery, fallback redirects, errors) is
tagged with ``method``, ``path`` and ``classification``.

Environment:
  DEBUG      — "true" lowers the default level to DEBUG
  LOG_LEVEL  — explicit level name, wins over DEBUG
  JSON_LOGS  — "false" switches to the console renderer
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog
from structlog.types import EventDict, Processor

SERVICE_NAME = "webhost"


def add_service(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the process.

    Args:
        log_level:   Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: JSON lines when True, console rendering otherwise.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def configure_from_env() -> str:
    """Configure logging from DEBUG / LOG_LEVEL / JSON_LOGS; returns the level used."""
    debug = os.getenv("DEBUG", "false").lower() == "true"
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO")
    json_output = os.getenv("JSON_LOGS", "true").lower() == "true"
    configure_logging(log_level=log_level, json_output=json_output)
    return log_level


def get_logger(name: str = SERVICE_NAME) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def request_context(method: str, path: str, classification: str) -> Iterator[None]:
    """Bind the request fields to every log entry emitted inside the block."""
    with structlog.contextvars.bound_contextvars(
        method=method,
        path=path,
        classification=classification,
    ):
        yield


configure_from_env()
