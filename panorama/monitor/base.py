"""Abstract base monitor — tick loop, early wake-up, alert emission."""

from __future__ import annotations

import abc
import asyncio
import time
from collections.abc import Callable

import structlog

from panorama.core.types import AlertTemplate
from panorama.monitor.notifier import Notifier

logger = structlog.stdlib.get_logger()

Clock = Callable[[], float]


class BaseMonitor(abc.ABC):
    """Abstract base class for domain monitors.

    Subclasses implement ``tick()`` and ``interval_secs()`` — the base class
    runs ticks strictly one after the other and between ticks waits for the
    refresh interval or an optional wake event, whichever comes first.
    Exceptions raised by ``tick()`` are not caught: a monitor that cannot
    observe its subject ends the daemon through the supervisor.
    """

    def __init__(
        self,
        name: str,
        notifier: Notifier,
        wake: asyncio.Event | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._name = name
        self._notifier = notifier
        self._wake = wake
        self._clock = clock
        self._tick_count = 0
        self._last_tick_time: float = 0.0

    @property
    def name(self) -> str:
        return self._name

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_tick_time(self) -> float:
        return self._last_tick_time

    @abc.abstractmethod
    async def tick(self) -> None:
        """Read the observed state once and emit any resulting alerts."""

    @abc.abstractmethod
    def interval_secs(self) -> float:
        """Delay before the next tick."""

    async def emit(
        self,
        templates: list[AlertTemplate],
        group: str,
        variables: dict[str, str],
    ) -> None:
        """Prepare each template and hand it to the notifier."""
        for template in templates:
            logger.info(
                "alert_emitted",
                monitor=self._name,
                group=group,
                severity=template.severity.value,
            )
            await self._notifier.notify(template.prepare(group, variables))

    async def run(self) -> None:
        """Tick forever."""
        logger.info("monitor_started", monitor=self._name)
        while True:
            await self.tick()
            self._tick_count += 1
            self._last_tick_time = self._clock()
            await self._wait(self.interval_secs())

    async def _wait(self, timeout: float) -> None:
        if self._wake is None:
            await asyncio.sleep(timeout)
            return
        try:
            await asyncio.wait_for(self._wake.wait(), timeout)
            logger.debug("monitor_woken", monitor=self._name)
        except TimeoutError:
            pass
        self._wake.clear()
