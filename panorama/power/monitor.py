"""PowerMonitor — AC / battery mode and battery capacity phases."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

import structlog

from panorama.core.config import PowerConfig
from panorama.monitor.base import BaseMonitor, Clock
from panorama.monitor.notifier import Notifier
from panorama.monitor.phases import PhaseClassifier
from panorama.monitor.state import DomainStateMachine
from panorama.power.system import (
    BatteryStatus,
    BatterySupply,
    MainsSupply,
    PowerSupply,
    read_all_supplies,
)

logger = structlog.stdlib.get_logger()

ALERT_GROUP_BATTERY = "panorama.battery_status"

SupplyReader = Callable[[Path], list[PowerSupply]]


class PowerMode(StrEnum):
    PLUGGED_IN = "plugged_in"
    BATTERY = "battery"


def is_on_battery(supplies: list[PowerSupply]) -> tuple[bool, BatterySupply | None]:
    """Decide the power mode from the first mains and first battery supply.

    Without a battery there is nothing to monitor, so the machine counts as
    plugged in. Without a mains entry the battery status decides.
    """
    mains = next((s for s in supplies if isinstance(s, MainsSupply)), None)
    battery = next((s for s in supplies if isinstance(s, BatterySupply)), None)

    if battery is None:
        return False, None
    if mains is not None:
        return not mains.online, battery
    return battery.status == BatteryStatus.DISCHARGING, battery


class PowerMonitor(BaseMonitor):
    """Watches AC state and battery capacity.

    Unplugging / plugging fires the activated / deactivated alerts; while on
    battery the capacity is classified into the configured phases.

    Usage::

        monitor = PowerMonitor(config, notifier, wake=watcher.subscribe())
        await monitor.run()
    """

    def __init__(
        self,
        config: PowerConfig,
        notifier: Notifier,
        wake: asyncio.Event | None = None,
        reader: SupplyReader = read_all_supplies,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__("power", notifier, wake=wake, clock=clock)
        self._config = config
        self._reader = reader
        self._classifier = PhaseClassifier(config.phases)
        self._machine = DomainStateMachine(
            alert_activated=config.alert_battery_activated,
            alert_deactivated=config.alert_battery_deactivated,
            classifier=self._classifier.classify,
        )

    @property
    def mode(self) -> PowerMode | None:
        """Current power mode; None before the first tick."""
        if self._machine.degraded is None:
            return None
        return PowerMode.BATTERY if self._machine.degraded else PowerMode.PLUGGED_IN

    @property
    def phase_name(self) -> str | None:
        phase = self._machine.phase
        return phase.name if phase is not None else None

    def interval_secs(self) -> float:
        return self._config.refresh_interval_secs

    async def tick(self) -> None:
        supplies = await asyncio.to_thread(self._reader, Path(self._config.supply_path))
        on_battery, battery = is_on_battery(supplies)

        variables: dict[str, str] = {}
        capacity: float | None = None
        if battery is not None:
            capacity = battery.capacity
            variables["capacity"] = str(battery.capacity)
            variables["status"] = battery.status.value

        previous_mode = self.mode
        previous_phase = self.phase_name
        alerts = self._machine.step(on_battery, capacity, self._clock())

        if self.mode != previous_mode:
            logger.info(
                "power_mode_changed",
                previous=previous_mode,
                mode=self.mode,
                capacity=capacity,
            )
        if self.phase_name != previous_phase:
            logger.info(
                "battery_phase_changed",
                previous=previous_phase,
                phase=self.phase_name,
                capacity=capacity,
            )

        await self.emit(alerts, ALERT_GROUP_BATTERY, variables)
        logger.debug("power_tick", mode=self.mode, capacity=capacity)
