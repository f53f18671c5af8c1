"""Power domain — sysfs power supplies and the battery monitor."""

from panorama.power.monitor import ALERT_GROUP_BATTERY, PowerMode, PowerMonitor, is_on_battery
from panorama.power.system import (
    BatteryStatus,
    BatterySupply,
    MainsSupply,
    PowerSupply,
    read_all_supplies,
    read_supply,
)

__all__ = [
    "ALERT_GROUP_BATTERY",
    "BatteryStatus",
    "BatterySupply",
    "MainsSupply",
    "PowerMode",
    "PowerMonitor",
    "PowerSupply",
    "is_on_battery",
    "read_all_supplies",
    "read_supply",
]
