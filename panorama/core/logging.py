"""Structured logging setup using structlog.

The daemon logs to stderr so it can run under a systemd user unit or a
desktop autostart entry. Records carry the logger name, which separates the
``alert_log`` decision stream from the monitors' own events, and httpx's
per-request lines are held back to WARNING because the reachability checks
run every few seconds while offline.
"""

from __future__ import annotations

import logging
import sys

import structlog

from panorama.core.config import get_settings


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    verbose: bool = False,
) -> None:
    """Configure structlog with JSON or console renderer.

    Args:
        level: Log level override (e.g. "DEBUG"). Uses config if None.
        fmt: Renderer format override ("json" or "console"). Uses config if None.
        verbose: Shortcut for ``level="DEBUG"`` when no explicit level is given.
    """
    if level is None and verbose:
        level = "DEBUG"
    if level is None or fmt is None:
        settings = get_settings()
        level = level or settings.logging.level
        fmt = fmt or settings.logging.format
    log_level = getattr(logging, level.upper(), logging.INFO)
    log_format = fmt

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # httpx logs every request at INFO; the online monitor polls constantly.
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
