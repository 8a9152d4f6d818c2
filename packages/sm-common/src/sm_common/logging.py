"""
Structured logging setup for speech-metric.

Configures structlog for JSON-formatted structured logging. Every log line
includes timestamp, level, service name, and event. Per-recognition context
(clip_id, engine) is passed as key/value pairs at the call site.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(
    level: str = "INFO",
    *,
    json_output: bool = True,
    service: str = "speech-metric",
) -> None:
    """Configure structlog for the current process.

    Safe to call more than once; the last call wins.

    Args:
        level: Minimum level name (``"DEBUG"`` ... ``"CRITICAL"``).
        json_output: Emit JSON lines when ``True``, coloured console output
            otherwise.
        service: Value bound to the ``service`` key of every event.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unsupported log level: {level}")

    renderer: structlog.typing.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)
