"""Core module — config, types, logging, exceptions."""

from panorama.core.config import Settings, get_settings, load_settings, reset_settings
from panorama.core.exceptions import (
    CollaboratorReadError,
    ConfigError,
    MonitorError,
    NotifyError,
    ProbeError,
)
from panorama.core.logging import setup_logging
from panorama.core.types import (
    AlertTemplate,
    Phase,
    PreparedAlert,
    Severity,
    Urgency,
    render,
)

__all__ = [
    "AlertTemplate",
    "CollaboratorReadError",
    "ConfigError",
    "MonitorError",
    "NotifyError",
    "Phase",
    "PreparedAlert",
    "ProbeError",
    "Settings",
    "Severity",
    "Urgency",
    "get_settings",
    "load_settings",
    "render",
    "reset_settings",
    "setup_logging",
]
