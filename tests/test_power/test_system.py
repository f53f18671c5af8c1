"""Tests for sysfs power supply reading."""

from __future__ import annotations

from pathlib import Path

import pytest

from panorama.core.exceptions import CollaboratorReadError
from panorama.power.system import (
    BatteryStatus,
    BatterySupply,
    MainsSupply,
    read_all_supplies,
    read_supply,
)


# ── Helpers ─────────────────────────────────────────────────────


def _supply(root: Path, name: str, **attrs: str) -> Path:
    path = root / name
    path.mkdir(parents=True)
    for attr, value in attrs.items():
        (path / attr).write_text(f"{value}\n")
    return path


# ── read_supply ─────────────────────────────────────────────────


class TestReadSupply:
    def test_battery(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "BAT0", type="Battery", status="Discharging", capacity="87")
        supply = read_supply(path)
        assert supply == BatterySupply(
            name="BAT0", status=BatteryStatus.DISCHARGING, capacity=87,
        )

    def test_battery_not_charging_status(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "BAT1", type="Battery", status="Not charging", capacity="80")
        supply = read_supply(path)
        assert isinstance(supply, BatterySupply)
        assert supply.status == BatteryStatus.NOT_CHARGING

    def test_mains_online(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "AC", type="Mains", online="1")
        assert read_supply(path) == MainsSupply(name="AC", online=True)

    def test_mains_offline(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "AC", type="Mains", online="0")
        assert read_supply(path) == MainsSupply(name="AC", online=False)

    def test_other_types_skipped(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "hidpp_battery_0", type="USB")
        assert read_supply(path) is None

    def test_unknown_status(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "BAT0", type="Battery", status="Exploding", capacity="5")
        with pytest.raises(CollaboratorReadError, match="unknown battery status"):
            read_supply(path)

    def test_bad_capacity(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "BAT0", type="Battery", status="Full", capacity="lots")
        with pytest.raises(CollaboratorReadError, match="capacity"):
            read_supply(path)

    def test_missing_attribute(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "BAT0", type="Battery", status="Full")
        with pytest.raises(CollaboratorReadError, match="could not read"):
            read_supply(path)

    def test_bad_online_value(self, tmp_path: Path) -> None:
        path = _supply(tmp_path, "AC", type="Mains", online="yes")
        with pytest.raises(CollaboratorReadError, match="mains online"):
            read_supply(path)


# ── read_all_supplies ───────────────────────────────────────────


class TestReadAllSupplies:
    def test_sorted_and_filtered(self, tmp_path: Path) -> None:
        _supply(tmp_path, "BAT0", type="Battery", status="Charging", capacity="50")
        _supply(tmp_path, "AC", type="Mains", online="1")
        _supply(tmp_path, "usb-mouse", type="USB")

        supplies = read_all_supplies(tmp_path)
        assert [s.name for s in supplies] == ["AC", "BAT0"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert read_all_supplies(tmp_path) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(CollaboratorReadError, match="could not list"):
            read_all_supplies(tmp_path / "nope")
