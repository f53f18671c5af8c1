"""Kernel device-change events — wake monitors as soon as hardware changes."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

import pyudev
import structlog

from panorama.core.exceptions import CollaboratorReadError

logger = structlog.stdlib.get_logger()

MonitorFactory = Callable[[Sequence[str]], Any]


def netlink_monitor(subsystems: Sequence[str]) -> pyudev.Monitor:
    """Open a udev netlink monitor filtered to *subsystems*."""
    context = pyudev.Context()
    monitor = pyudev.Monitor.from_netlink(context)
    for subsystem in subsystems:
        monitor.filter_by(subsystem=subsystem)
    return monitor


class DeviceEventWatcher:
    """Turns udev events into wake-ups for subscribed monitors.

    The event payload is not interpreted: monitors re-read their state from
    sysfs anyway, udev only tells them to do it now rather than at the next
    interval. Unplugging a laptop emits several events (AC and battery);
    they are drained together into a single wake-up.

    Usage::

        watcher = DeviceEventWatcher(["power_supply", "usb"])
        wake = watcher.subscribe()
        await watcher.run()
    """

    def __init__(
        self,
        subsystems: Sequence[str] = ("power_supply", "usb"),
        monitor_factory: MonitorFactory = netlink_monitor,
    ) -> None:
        self._subsystems = list(subsystems)
        self._monitor_factory = monitor_factory
        self._subscribers: list[asyncio.Event] = []
        self._event_count = 0

    @property
    def event_count(self) -> int:
        return self._event_count

    def subscribe(self) -> asyncio.Event:
        """Return an event that is set whenever a device changes."""
        event = asyncio.Event()
        self._subscribers.append(event)
        return event

    def _open(self) -> Any:
        try:
            monitor = self._monitor_factory(self._subsystems)
            monitor.start()
        except (OSError, ImportError) as exc:
            raise CollaboratorReadError(f"could not listen on udev socket: {exc}") from exc
        return monitor

    def _drain(self, monitor: Any) -> int:
        count = 0
        while True:
            device = monitor.poll(timeout=0)
            if device is None:
                return count
            count += 1
            logger.debug(
                "device_event",
                action=getattr(device, "action", None),
                subsystem=getattr(device, "subsystem", None),
                sys_name=getattr(device, "sys_name", None),
            )

    async def run(self) -> None:
        """Watch for device events forever."""
        monitor = self._open()
        loop = asyncio.get_running_loop()
        readable = asyncio.Event()
        fd = monitor.fileno()
        loop.add_reader(fd, readable.set)
        logger.info("device_watcher_started", subsystems=self._subsystems)
        try:
            while True:
                await readable.wait()
                readable.clear()
                count = self._drain(monitor)
                if count == 0:
                    continue
                self._event_count += count
                for event in self._subscribers:
                    event.set()
        finally:
            loop.remove_reader(fd)
