"""Fail-fast supervisor for the daemon's long-running units."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

from panorama.core.exceptions import ConfigError

logger = structlog.stdlib.get_logger()

Unit = Coroutine[Any, Any, None]


class Supervisor:
    """Runs every unit concurrently; the first one to finish ends the run.

    A unit finishing — cleanly or with an exception — means something is
    broken (every unit is meant to run forever), so the supervisor stops
    waiting, cancels the rest and propagates that unit's outcome.

    Usage::

        supervisor = Supervisor()
        supervisor.add("power", power_monitor.run())
        supervisor.add("notifier", notifier.run())
        await supervisor.run()
    """

    def __init__(self) -> None:
        self._units: list[tuple[str, Unit]] = []

    @property
    def unit_names(self) -> list[str]:
        return [name for name, _ in self._units]

    def add(self, name: str, unit: Unit) -> None:
        """Register a unit; it starts when :meth:`run` is awaited."""
        self._units.append((name, unit))

    async def run(self) -> None:
        """Run all units until the first one finishes.

        Raises:
            ConfigError: No units were added.
            Exception: Whatever the first finishing unit raised.
        """
        if not self._units:
            raise ConfigError("no units to supervise")

        tasks: dict[asyncio.Task[None], str] = {
            asyncio.create_task(unit, name=name): name for name, unit in self._units
        }
        self._units = []
        logger.info("supervisor_started", units=list(tasks.values()))

        try:
            done, _pending = await asyncio.wait(
                tasks,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        # Several units may finish in the same loop iteration; report one.
        first = next(iter(done))
        name = tasks[first]
        if first.cancelled():
            logger.warning("unit_cancelled", unit=name)
            raise asyncio.CancelledError(f"unit '{name}' was cancelled")
        exc = first.exception()
        if exc is not None:
            logger.error("unit_failed", unit=name, error=str(exc))
            raise exc
        logger.warning("unit_finished", unit=name)
