"""Application wiring — builds monitors, notifier and supervisor from settings."""

from __future__ import annotations

import structlog

from panorama.core.config import Settings
from panorama.core.exceptions import ConfigError
from panorama.fs.monitor import FsMonitor
from panorama.internet.monitor import OnlineMonitor
from panorama.monitor.base import BaseMonitor
from panorama.monitor.factory import create_notifier
from panorama.monitor.notifier import Notifier
from panorama.monitor.sinks import NotificationSink
from panorama.monitor.supervisor import Supervisor
from panorama.power.monitor import PowerMonitor
from panorama.udev.watcher import DeviceEventWatcher

logger = structlog.stdlib.get_logger()


class App:
    """The assembled daemon: one task per monitor, the device watcher and the notifier."""

    def __init__(
        self,
        notifier: Notifier,
        monitors: list[BaseMonitor],
        watcher: DeviceEventWatcher | None = None,
    ) -> None:
        if not monitors:
            raise ConfigError("No checks enabled - exiting")
        self._notifier = notifier
        self._monitors = monitors
        self._watcher = watcher

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def monitors(self) -> list[BaseMonitor]:
        return list(self._monitors)

    @property
    def watcher(self) -> DeviceEventWatcher | None:
        return self._watcher

    def build_supervisor(self) -> Supervisor:
        supervisor = Supervisor()
        for monitor in self._monitors:
            supervisor.add(monitor.name, monitor.run())
        if self._watcher is not None:
            supervisor.add("udev", self._watcher.run())
        supervisor.add("notifier", self._notifier.run())
        return supervisor

    async def run(self) -> None:
        """Run until the first unit stops; its outcome is the daemon's outcome."""
        supervisor = self.build_supervisor()
        logger.info("panorama_started", units=supervisor.unit_names)
        try:
            await supervisor.run()
        finally:
            await self.close()

    async def close(self) -> None:
        for monitor in self._monitors:
            if isinstance(monitor, OnlineMonitor):
                await monitor.close()
        await self._notifier.close()


def build_app(settings: Settings, sink: NotificationSink | None = None) -> App:
    """Validate the enabled sections and assemble the daemon.

    Raises:
        ConfigError: Invalid phases, empty URL list, or nothing enabled.
    """
    notifier = create_notifier(settings.notify, sink=sink)

    watcher: DeviceEventWatcher | None = None
    if settings.power.enabled and settings.device_events.enabled:
        watcher = DeviceEventWatcher(settings.device_events.subsystems)

    monitors: list[BaseMonitor] = []
    if settings.power.enabled:
        wake = watcher.subscribe() if watcher is not None else None
        monitors.append(PowerMonitor(settings.power, notifier, wake=wake))
        logger.info("monitor_enabled", monitor="power")

    if settings.online.enabled:
        monitors.append(OnlineMonitor(settings.online, notifier))
        logger.info("monitor_enabled", monitor="online")

    if settings.fs.enabled:
        monitors.append(FsMonitor(settings.fs, notifier))
        logger.info("monitor_enabled", monitor="fs")

    return App(notifier, monitors, watcher)
