"""Mounted filesystems and their fill level."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import psutil
from pydantic import BaseModel, Field

from panorama.core.exceptions import CollaboratorReadError

DEFAULT_MOUNTS_PATH = Path("/proc/mounts")

# Maps a mountpoint to its usage in percent (0–100).
UsageSource = Callable[[str], float]


class Mount(BaseModel):
    """One line of ``/proc/mounts``."""

    device: str
    mountpoint: str
    fstype: str
    options: list[str] = Field(default_factory=list)


def _unescape(field: str) -> str:
    # The kernel octal-escapes space, tab, newline and backslash.
    for code, char in (("\\040", " "), ("\\011", "\t"), ("\\012", "\n"), ("\\134", "\\")):
        field = field.replace(code, char)
    return field


def parse_proc_mount_line(line: str) -> Mount:
    """Parse ``device mountpoint fstype options dump pass``.

    Raises:
        CollaboratorReadError: The line has fewer than four fields.
    """
    parts = line.split()
    if len(parts) < 4:
        raise CollaboratorReadError(f"could not parse mount line '{line}'")
    device, mountpoint, fstype, options = parts[:4]
    return Mount(
        device=_unescape(device),
        mountpoint=_unescape(mountpoint),
        fstype=fstype,
        options=options.split(","),
    )


def parse_proc_mounts(content: str) -> list[Mount]:
    """Parse the whole of ``/proc/mounts``, skipping blank lines."""
    return [
        parse_proc_mount_line(line.strip())
        for line in content.strip().splitlines()
        if line.strip()
    ]


def load_proc_mounts(path: Path = DEFAULT_MOUNTS_PATH) -> list[Mount]:
    """Read and parse the mount table.

    Blocking — call through ``asyncio.to_thread``.
    """
    try:
        content = path.read_text()
    except OSError as exc:
        raise CollaboratorReadError(f"could not read '{path}': {exc}") from exc
    return parse_proc_mounts(content)


def psutil_usage(mountpoint: str) -> float:
    """Default usage source: ``psutil.disk_usage(mountpoint).percent``."""
    return float(psutil.disk_usage(mountpoint).percent)
