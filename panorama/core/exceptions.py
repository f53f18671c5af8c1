"""Exception hierarchy for the monitoring engine."""

from __future__ import annotations


class MonitorError(Exception):
    """Base exception for all panorama errors."""


class ConfigError(MonitorError):
    """Invalid configuration — fatal at startup, never raised at runtime."""


class ProbeError(MonitorError):
    """A reachability check failed (transport, HTTP status or body mismatch)."""


class NotifyError(MonitorError):
    """The notification sink could not deliver an alert."""


class CollaboratorReadError(MonitorError):
    """Could not read the state a monitor observes (sysfs, /proc/mounts)."""
