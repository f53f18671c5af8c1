"""Kernel device-change events."""

from panorama.udev.watcher import DeviceEventWatcher, netlink_monitor

__all__ = ["DeviceEventWatcher", "netlink_monitor"]
