"""FsMonitor — per-mount disk fill-level phases."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from pathlib import Path

import structlog

from panorama.core.config import FsConfig
from panorama.fs.mounts import Mount, UsageSource, load_proc_mounts, psutil_usage
from panorama.monitor.base import BaseMonitor, Clock
from panorama.monitor.notifier import Notifier
from panorama.monitor.phases import PhaseClassifier
from panorama.monitor.state import DomainStateMachine

logger = structlog.stdlib.get_logger()

ALERT_GROUP_FS_PREFIX = "panorama.fs."

MountLoader = Callable[[Path], list[Mount]]


def alert_group(mount: Mount) -> str:
    return f"{ALERT_GROUP_FS_PREFIX}{mount.device}"


class FsMonitor(BaseMonitor):
    """Watches the fill level of every mounted filesystem that passes the filters.

    Each device gets its own state machine so phase entry and repeat timers
    are tracked per device. A device mounted several times (bind mounts,
    btrfs subvolumes) is checked once, through its first mountpoint.
    """

    def __init__(
        self,
        config: FsConfig,
        notifier: Notifier,
        usage_source: UsageSource = psutil_usage,
        loader: MountLoader = load_proc_mounts,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__("fs", notifier, clock=clock)
        self._config = config
        self._usage_source = usage_source
        self._loader = loader
        self._classifier = PhaseClassifier(config.phases)
        self._machines: dict[str, DomainStateMachine] = {}

    @property
    def tracked_devices(self) -> set[str]:
        return set(self._machines)

    def phase_name(self, device: str) -> str | None:
        machine = self._machines.get(device)
        if machine is None or machine.phase is None:
            return None
        return machine.phase.name

    def interval_secs(self) -> float:
        return self._config.check_interval_secs

    def is_watched(self, mount: Mount) -> bool:
        """Apply the device / fstype include and exclude filters."""
        cfg = self._config
        if mount.device in cfg.device_path_exclude:
            return False
        if mount.fstype in cfg.fs_type_exclude:
            return False
        if cfg.fs_type_include is not None and mount.fstype not in cfg.fs_type_include:
            return False
        return True

    def _read_usages(self, mounts: list[Mount]) -> list[tuple[Mount, float]]:
        """Blocking: usage of each mount, skipping the ones that fail."""
        usages: list[tuple[Mount, float]] = []
        for mount in mounts:
            try:
                usages.append((mount, self._usage_source(mount.mountpoint)))
            except (OSError, ValueError) as exc:
                logger.warning(
                    "disk_usage_read_failed",
                    device=mount.device,
                    mountpoint=mount.mountpoint,
                    error=str(exc),
                )
        return usages

    async def tick(self) -> None:
        mounts = await asyncio.to_thread(self._loader, Path(self._config.mounts_path))

        by_device: dict[str, Mount] = {}
        for mount in mounts:
            if self.is_watched(mount) and mount.device not in by_device:
                by_device[mount.device] = mount

        # Forget devices that were unmounted.
        for device in set(self._machines) - set(by_device):
            logger.debug("fs_device_gone", device=device)
            del self._machines[device]

        usages = await asyncio.to_thread(self._read_usages, list(by_device.values()))
        now = self._clock()
        for mount, usage in usages:
            await self._check_mount(mount, usage, now)

        logger.debug("fs_tick", mounts=len(usages))

    async def _check_mount(self, mount: Mount, usage: float, now: float) -> None:
        machine = self._machines.get(mount.device)
        if machine is None:
            machine = DomainStateMachine(classifier=self._classifier.classify)
            self._machines[mount.device] = machine

        percent = round(usage)
        previous_phase = self.phase_name(mount.device)
        alerts = machine.step(True, percent, now)
        if self.phase_name(mount.device) != previous_phase:
            logger.info(
                "disk_phase_changed",
                device=mount.device,
                mountpoint=mount.mountpoint,
                previous=previous_phase,
                phase=self.phase_name(mount.device),
                usage_percent=percent,
            )

        variables = {
            "usage_percent": str(percent),
            "device": mount.device,
            "mountpoint": mount.mountpoint,
            "fstype": mount.fstype,
        }
        await self.emit(alerts, alert_group(mount), variables)
