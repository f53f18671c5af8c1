"""Read power supply information from sysfs.

See https://www.kernel.org/doc/Documentation/ABI/testing/sysfs-class-power
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

import structlog
from pydantic import BaseModel

from panorama.core.exceptions import CollaboratorReadError

logger = structlog.stdlib.get_logger()

DEFAULT_SUPPLY_PATH = Path("/sys/class/power_supply")


class BatteryStatus(StrEnum):
    """Values of ``/sys/class/power_supply/<name>/status``."""

    UNKNOWN = "Unknown"
    CHARGING = "Charging"
    DISCHARGING = "Discharging"
    NOT_CHARGING = "Not charging"
    FULL = "Full"


class BatterySupply(BaseModel):
    name: str
    status: BatteryStatus
    capacity: int


class MainsSupply(BaseModel):
    name: str
    online: bool


PowerSupply = BatterySupply | MainsSupply


def _read_attr(path: Path, attr: str) -> str:
    try:
        return (path / attr).read_text().strip()
    except OSError as exc:
        raise CollaboratorReadError(f"could not read '{path / attr}': {exc}") from exc


def read_supply(path: Path) -> PowerSupply | None:
    """Read one supply directory; returns None for types we do not monitor.

    Raises:
        CollaboratorReadError: An attribute is missing or malformed.
    """
    name = path.name
    kind = _read_attr(path, "type")

    if kind == "Battery":
        status_raw = _read_attr(path, "status")
        try:
            status = BatteryStatus(status_raw)
        except ValueError as exc:
            raise CollaboratorReadError(
                f"unknown battery status '{status_raw}' for '{name}'"
            ) from exc
        capacity_raw = _read_attr(path, "capacity")
        try:
            capacity = int(capacity_raw)
        except ValueError as exc:
            raise CollaboratorReadError(
                f"could not parse battery capacity '{capacity_raw}' for '{name}'"
            ) from exc
        return BatterySupply(name=name, status=status, capacity=capacity)

    if kind == "Mains":
        online_raw = _read_attr(path, "online")
        try:
            online = int(online_raw) == 1
        except ValueError as exc:
            raise CollaboratorReadError(
                f"could not parse mains online state '{online_raw}' for '{name}'"
            ) from exc
        return MainsSupply(name=name, online=online)

    # USB, Wireless, UPS ... are not monitored.
    logger.debug("power_supply_skipped", supply=name, type=kind)
    return None


def read_all_supplies(root: Path = DEFAULT_SUPPLY_PATH) -> list[PowerSupply]:
    """Read every supply under *root*, sorted by name.

    Blocking — call through ``asyncio.to_thread``.

    Raises:
        CollaboratorReadError: The directory or a supply cannot be read.
    """
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        raise CollaboratorReadError(f"could not list '{root}': {exc}") from exc

    supplies: list[PowerSupply] = []
    for entry in entries:
        supply = read_supply(entry)
        if supply is not None:
            supplies.append(supply)
    return supplies
