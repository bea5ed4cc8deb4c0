"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

# Microsoft.Extensions.Logging level names, as found in camelCase config files.
_LEVEL_ALIASES = {
    "trace": "debug",
    "information": "info",
    "none": "critical",
}


def resolve_log_level(log_level: str) -> int:
    """Map a level name (any casing, .NET names included) to a logging level.

    Unknown names fall back to WARNING.
    """
    name = log_level.strip().lower()
    name = _LEVEL_ALIASES.get(name, name)
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(log_level: str = "warning", log_format: str = "console") -> None:
    """Configure structured logging for WikiSift.

    Records from standard-library loggers are rendered through structlog,
    and everything goes to stderr so stdout stays free for search output.

    Args:
        log_level: debug, info, warning, error or critical. The .NET names
            Trace, Information and Critical are accepted too.
        log_format: ``console`` for human-readable lines, anything else for JSON.
    """
    level = resolve_log_level(log_level)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
