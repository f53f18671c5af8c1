#!/usr/bin/env python3
"""Daemon entrypoint — loads config, wires the monitors and runs until stopped.

Usage::

    # Run with ~/.config/panorama/config.yaml (or built-in defaults)
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config ~/panorama.yaml

    # Verbose logging
    python scripts/run.py -v

    # Print the default config
    python scripts/run.py --dump-default-config
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from panorama.app import build_app
from panorama.core.config import dump_default_settings, load_settings
from panorama.core.exceptions import ConfigError, MonitorError
from panorama.core.logging import setup_logging

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start all monitors and run until interrupted or a unit fails."""
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        setup_logging(level=args.log_level or ("DEBUG" if args.verbose else "INFO"), fmt="console")
        logger.error("config_invalid", error=str(exc))
        return 1
    setup_logging(level=args.log_level, verbose=args.verbose)

    logger.info(
        "panorama_starting",
        config=args.config,
        power=settings.power.enabled,
        online=settings.online.enabled,
        fs=settings.fs.enabled,
        notify_backend=settings.notify.backend,
    )

    try:
        app = build_app(settings)
    except ConfigError as exc:
        logger.error("config_invalid", error=str(exc))
        return 1

    main_task = asyncio.current_task()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        if main_task is not None:
            main_task.cancel()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    try:
        await app.run()
    except asyncio.CancelledError:
        logger.info("panorama_stopped")
        return 0
    except MonitorError as exc:
        logger.error("panorama_failed", error=str(exc))
        return 1
    except Exception:
        logger.exception("panorama_crashed")
        return 1

    logger.warning("panorama_stopped_unexpectedly")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="panorama - a status daemon for Linux",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config YAML (default: ~/.config/panorama/config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--dump-default-config",
        action="store_true",
        help="Print the default config file and exit",
    )
    args = parser.parse_args()

    if args.dump_default_config:
        print(dump_default_settings())
        sys.exit(0)

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
