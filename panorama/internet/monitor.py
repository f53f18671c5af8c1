"""OnlineMonitor — internet reachability via HTTP checks."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import StrEnum

import structlog

from panorama.core.config import CheckUrl, OnlineConfig
from panorama.internet.probe import HttpProbe
from panorama.monitor.base import BaseMonitor, Clock
from panorama.monitor.notifier import Notifier
from panorama.monitor.probe import ProbeEvaluator, SleepFn
from panorama.monitor.state import DomainStateMachine

logger = structlog.stdlib.get_logger()

ALERT_GROUP_INTERNET = "panorama.internet"

Probe = Callable[[CheckUrl], Awaitable[None]]


class OnlineMode(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class OnlineMonitor(BaseMonitor):
    """Checks whether the internet is reachable.

    Each tick runs the configured URL checks with retries; losing or regaining
    connectivity fires the disconnected / reconnected alerts. Offline systems
    are re-checked more often than online ones.
    """

    def __init__(
        self,
        config: OnlineConfig,
        notifier: Notifier,
        probe: Probe | None = None,
        sleep: SleepFn = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__("online", notifier, clock=clock)
        self._config = config
        self._http_probe: HttpProbe | None = None
        if probe is None:
            self._http_probe = HttpProbe(timeout_secs=config.http_timeout_secs)
            probe = self._http_probe
        self._evaluator: ProbeEvaluator[CheckUrl] = ProbeEvaluator(
            config.urls,
            probe,
            retry_count=config.retry_count,
            retry_interval_secs=config.retry_interval_secs,
            sleep=sleep,
        )
        self._machine = DomainStateMachine(
            alert_activated=config.alert_disconnected,
            alert_deactivated=config.alert_reconnected,
        )
        self._check_count = 0

    @property
    def mode(self) -> OnlineMode | None:
        """Current reachability mode; None before the first tick."""
        if self._machine.degraded is None:
            return None
        return OnlineMode.OFFLINE if self._machine.degraded else OnlineMode.ONLINE

    @property
    def offline_since(self) -> float | None:
        return self._machine.degraded_since

    @property
    def check_count(self) -> int:
        return self._check_count

    def interval_secs(self) -> float:
        if self.mode == OnlineMode.OFFLINE:
            return self._config.check_interval_secs_offline
        return self._config.check_interval_secs_online

    async def tick(self) -> None:
        reachable = await self._evaluator.evaluate()
        self._check_count += 1
        now = self._clock()

        variables: dict[str, str] = {}
        offline_since = self._machine.degraded_since
        if reachable and offline_since is not None:
            variables["offline_secs"] = str(int(now - offline_since))

        previous_mode = self.mode
        alerts = self._machine.step(not reachable, None, now)
        if self.mode != previous_mode:
            logger.info(
                "online_mode_changed",
                previous=previous_mode,
                mode=self.mode,
                attempts=self._evaluator.last_attempts,
            )

        await self.emit(alerts, ALERT_GROUP_INTERNET, variables)

    async def close(self) -> None:
        if self._http_probe is not None:
            await self._http_probe.close()
