"""Tests for PowerMonitor — mode detection, capacity phases, alert emission."""

from __future__ import annotations

from pathlib import Path

import pytest

from panorama.core.config import PowerConfig
from panorama.core.exceptions import CollaboratorReadError, ConfigError
from panorama.core.types import AlertTemplate, Phase, PreparedAlert
from panorama.monitor.notifier import Notifier
from panorama.monitor.sinks import NotificationSink
from panorama.monitor.types import NotificationRequest
from panorama.power.monitor import (
    ALERT_GROUP_BATTERY,
    PowerMode,
    PowerMonitor,
    is_on_battery,
)
from panorama.power.system import BatteryStatus, BatterySupply, MainsSupply, PowerSupply


# ── Helpers ─────────────────────────────────────────────────────


class NullSink(NotificationSink):
    async def send(self, request: NotificationRequest) -> str:
        return "1"


class RecordingNotifier(Notifier):
    """Captures prepared alerts instead of queueing them."""

    def __init__(self) -> None:
        super().__init__(NullSink())
        self.alerts: list[PreparedAlert] = []

    async def notify(self, alert: PreparedAlert) -> None:
        self.alerts.append(alert)


class FakeSystem:
    """Mutable stand-in for /sys/class/power_supply."""

    def __init__(self, online: bool = True, capacity: int = 80) -> None:
        self.online: bool | None = online
        self.capacity = capacity
        self.status = BatteryStatus.CHARGING
        self.paths: list[Path] = []

    def read(self, path: Path) -> list[PowerSupply]:
        self.paths.append(path)
        supplies: list[PowerSupply] = [
            BatterySupply(name="BAT0", status=self.status, capacity=self.capacity),
        ]
        if self.online is not None:
            supplies.insert(0, MainsSupply(name="AC", online=self.online))
        return supplies


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _monitor(system: FakeSystem, clock: FakeClock, **kw: object) -> tuple[PowerMonitor, RecordingNotifier]:
    notifier = RecordingNotifier()
    config = PowerConfig(**kw)  # type: ignore[arg-type]
    monitor = PowerMonitor(config, notifier, reader=system.read, clock=clock)
    return monitor, notifier


def _summaries(alerts: list[PreparedAlert]) -> list[str]:
    return [a.template.summary for a in alerts]


# ── is_on_battery ───────────────────────────────────────────────


class TestIsOnBattery:
    def test_no_battery_is_plugged_in(self) -> None:
        assert is_on_battery([MainsSupply(name="AC", online=False)]) == (False, None)

    def test_mains_decides_when_present(self) -> None:
        bat = BatterySupply(name="BAT0", status=BatteryStatus.CHARGING, capacity=50)
        assert is_on_battery([MainsSupply(name="AC", online=False), bat]) == (True, bat)
        assert is_on_battery([MainsSupply(name="AC", online=True), bat]) == (False, bat)

    def test_status_decides_without_mains(self) -> None:
        draining = BatterySupply(name="BAT0", status=BatteryStatus.DISCHARGING, capacity=50)
        full = BatterySupply(name="BAT0", status=BatteryStatus.FULL, capacity=100)
        assert is_on_battery([draining]) == (True, draining)
        assert is_on_battery([full]) == (False, full)

    def test_first_battery_wins(self) -> None:
        first = BatterySupply(name="BAT0", status=BatteryStatus.DISCHARGING, capacity=10)
        second = BatterySupply(name="BAT1", status=BatteryStatus.FULL, capacity=100)
        assert is_on_battery([first, second]) == (True, first)


# ── Monitor ─────────────────────────────────────────────────────


class TestPowerMonitor:
    async def test_startup_plugged_in_is_silent(self) -> None:
        system, clock = FakeSystem(online=True), FakeClock()
        monitor, notifier = _monitor(system, clock)

        await monitor.tick()
        assert monitor.mode == PowerMode.PLUGGED_IN
        assert notifier.alerts == []
        assert system.paths == [Path("/sys/class/power_supply")]

    async def test_startup_on_battery_alerts(self) -> None:
        system, clock = FakeSystem(online=False, capacity=80), FakeClock()
        monitor, notifier = _monitor(system, clock)

        await monitor.tick()
        assert monitor.mode == PowerMode.BATTERY
        assert monitor.phase_name == "full"
        assert len(notifier.alerts) == 1
        alert = notifier.alerts[0]
        assert alert.group == ALERT_GROUP_BATTERY
        assert alert.variables == {"capacity": "80", "status": "Charging"}

    async def test_unplug_and_replug(self) -> None:
        system, clock = FakeSystem(online=True, capacity=30), FakeClock()
        monitor, notifier = _monitor(system, clock)
        await monitor.tick()

        system.online = False
        clock.now = 5
        await monitor.tick()
        assert _summaries(notifier.alerts) == [
            "Unplugged - switched to battery (${capacity}%)",
            "Battery is getting low. (${capacity}%)",
        ]
        assert all(a.group == ALERT_GROUP_BATTERY for a in notifier.alerts)

        system.online = True
        clock.now = 10
        await monitor.tick()
        assert _summaries(notifier.alerts)[-1] == "Plugged in! Battery is charging (${capacity}%)"
        assert monitor.phase_name is None

    async def test_low_phase_repeats(self) -> None:
        system, clock = FakeSystem(online=True, capacity=15), FakeClock()
        monitor, notifier = _monitor(system, clock)
        await monitor.tick()
        system.online = False
        await monitor.tick()
        assert len(notifier.alerts) == 2

        clock.now = 300
        await monitor.tick()
        assert len(notifier.alerts) == 2

        clock.now = 700
        system.capacity = 14
        await monitor.tick()
        assert len(notifier.alerts) == 3
        assert notifier.alerts[-1].variables["capacity"] == "14"

    async def test_custom_phases_and_alerts(self) -> None:
        system, clock = FakeSystem(online=False, capacity=10), FakeClock()
        monitor, notifier = _monitor(
            system,
            clock,
            phases=[Phase(name="low", from_=0, to=50, alert=AlertTemplate(summary="low"))],
            alert_battery_activated=None,
        )
        await monitor.tick()
        assert _summaries(notifier.alerts) == ["low"]

    async def test_invalid_phases_rejected(self) -> None:
        with pytest.raises(ConfigError):
            _monitor(
                FakeSystem(),
                FakeClock(),
                phases=[
                    Phase(name="a", from_=0, to=50),
                    Phase(name="b", from_=40, to=100),
                ],
            )

    async def test_read_error_propagates(self) -> None:
        def broken(path: Path) -> list[PowerSupply]:
            raise CollaboratorReadError("sysfs gone")

        monitor = PowerMonitor(PowerConfig(), RecordingNotifier(), reader=broken)
        with pytest.raises(CollaboratorReadError):
            await monitor.tick()

    async def test_interval_from_config(self) -> None:
        monitor, _ = _monitor(FakeSystem(), FakeClock(), refresh_interval_secs=2)
        assert monitor.interval_secs() == 2
