"""Filesystem domain — mount table parsing and disk fill-level monitor."""

from panorama.fs.monitor import ALERT_GROUP_FS_PREFIX, FsMonitor
from panorama.fs.mounts import (
    Mount,
    UsageSource,
    load_proc_mounts,
    parse_proc_mount_line,
    parse_proc_mounts,
    psutil_usage,
)

__all__ = [
    "ALERT_GROUP_FS_PREFIX",
    "FsMonitor",
    "Mount",
    "UsageSource",
    "load_proc_mounts",
    "parse_proc_mount_line",
    "parse_proc_mounts",
    "psutil_usage",
]
