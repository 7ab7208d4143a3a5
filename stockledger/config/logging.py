"""
Structured logging for the ledger service using structlog.

Console output in development, JSON lines elsewhere. Every event carries the
service context; events emitted while a document is processed also carry
its reference through `document_context`.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor

from stockledger.config.settings import get_settings

# Decimal places kept for float fields in log events
FLOAT_PRECISION = 6


def add_service_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    event_dict["storage"] = settings.storage.backend
    return event_dict


def round_floats(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Round top-level float values (quantities, costs, scores)."""
    for key, value in event_dict.items():
        if isinstance(value, float):
            event_dict[key] = round(value, FLOAT_PRECISION)
    return event_dict


@contextmanager
def document_context(reference: str, kind: str) -> Iterator[None]:
    """Bind a document reference to every log event inside the block."""
    with structlog.contextvars.bound_contextvars(document=reference or None, document_kind=kind):
        yield


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger."""
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        round_floats,
        add_service_context,
    ]

    if settings.environment == "development":
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
        force=True,
    )
    # Per-statement debug output from the driver and per-request access lines
    for name in ("aiosqlite", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
