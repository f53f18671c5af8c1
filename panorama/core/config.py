"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from panorama.core.exceptions import ConfigError
from panorama.core.types import AlertTemplate, Phase, Severity

_settings: Settings | None = None


def default_config_path() -> Path:
    """``~/.config/panorama/config.yaml``."""
    return Path.home() / ".config" / "panorama" / "config.yaml"


def _default_battery_phases() -> list[Phase]:
    return [
        Phase(
            name="almost_empty",
            from_=0,
            to=5,
            alert=AlertTemplate(
                severity=Severity.CRITICAL,
                repeat_after_secs=3 * 60,
                summary="Battery is almost empty! (${capacity}%)",
            ),
        ),
        Phase(
            name="low",
            from_=6,
            to=20,
            alert=AlertTemplate(
                severity=Severity.WARNING,
                repeat_after_secs=10 * 60,
                expire_after_secs=60,
                summary="Battery is low! (${capacity}%)",
            ),
        ),
        Phase(
            name="draining",
            from_=21,
            to=40,
            alert=AlertTemplate(
                severity=Severity.INFO,
                repeat_after_secs=20 * 60,
                expire_after_secs=10,
                summary="Battery is getting low. (${capacity}%)",
            ),
        ),
        Phase(name="full", from_=41, to=100),
    ]


def _default_disk_phases() -> list[Phase]:
    return [
        Phase(
            name="almost_full",
            from_=95,
            to=100,
            alert=AlertTemplate(
                severity=Severity.WARNING,
                expire_after_secs=180,
                summary="Disk '${mountpoint}' is almost full! (${usage_percent}%)",
            ),
        ),
    ]


class PowerConfig(BaseModel):
    """Battery / AC monitoring."""

    enabled: bool = True
    refresh_interval_secs: float = Field(default=5.0, gt=0)
    supply_path: str = "/sys/class/power_supply"
    phases: list[Phase] = Field(default_factory=_default_battery_phases)
    alert_battery_activated: AlertTemplate | None = AlertTemplate(
        summary="Unplugged - switched to battery (${capacity}%)",
    )
    alert_battery_deactivated: AlertTemplate | None = AlertTemplate(
        expire_after_secs=10,
        summary="Plugged in! Battery is charging (${capacity}%)",
    )

    @field_validator("phases")
    @classmethod
    def _fallback_phases(cls, value: list[Phase]) -> list[Phase]:
        return value or _default_battery_phases()


class CheckUrl(BaseModel):
    """One HTTP reachability check."""

    url: str
    body_contains: str | None = None


class OnlineConfig(BaseModel):
    """Internet reachability monitoring."""

    enabled: bool = True
    urls: list[CheckUrl] = [
        CheckUrl(url="https://wikipedia.org", body_contains="Wikimedia Foundation"),
        CheckUrl(url="https://news.ycombinator.com", body_contains="Hacker News"),
    ]
    http_timeout_secs: float = Field(default=20.0, gt=0)
    check_interval_secs_online: float = Field(default=30.0, gt=0)
    check_interval_secs_offline: float = Field(default=3.0, gt=0)
    # Extra attempts before the system is considered offline.
    retry_count: int = Field(default=2, ge=0)
    retry_interval_secs: float = Field(default=5.0, ge=0)
    alert_reconnected: AlertTemplate | None = AlertTemplate(
        on_startup=False,
        expire_after_secs=10,
        summary="Internet is reachable!",
    )
    alert_disconnected: AlertTemplate | None = AlertTemplate(
        severity=Severity.CRITICAL,
        on_startup=False,
        summary="Internet is unreachable - system appears to be offline!",
    )


class FsConfig(BaseModel):
    """Filesystem fill-level monitoring."""

    enabled: bool = True
    check_interval_secs: float = Field(default=300.0, gt=0)
    mounts_path: str = "/proc/mounts"
    device_path_exclude: list[str] = []
    fs_type_include: list[str] | None = None
    fs_type_exclude: list[str] = [
        "proc",
        "sysfs",
        "devtmpfs",
        "devpts",
        "tmpfs",
        "ramfs",
        "cgroup",
        "cgroup2",
        "securityfs",
        "debugfs",
        "tracefs",
        "pstore",
        "bpf",
        "configfs",
        "fusectl",
        "mqueue",
        "hugetlbfs",
        "autofs",
        "squashfs",
        "overlay",
    ]
    phases: list[Phase] = Field(default_factory=_default_disk_phases)


class DeviceEventsConfig(BaseModel):
    """Kernel device-change events used to wake the power monitor early."""

    enabled: bool = True
    subsystems: list[str] = ["power_supply", "usb"]


class DiscordConfig(BaseModel):
    """Discord webhook sink configuration."""

    webhook_url: SecretStr = SecretStr("")
    username: str = "Panorama"


class NotifyConfig(BaseModel):
    """Notification sink selection."""

    backend: Literal["notify_send", "discord"] = "notify_send"
    app_name: str = "Panorama"
    command: str = "notify-send"
    # Upper bound for one delivery (notify-send run or webhook request).
    send_timeout_secs: float = Field(default=10.0, gt=0)
    queue_size: int = Field(default=100, gt=0)
    discord: DiscordConfig = DiscordConfig()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"


class Settings(BaseModel):
    """Root settings container."""

    power: PowerConfig = PowerConfig()
    online: OnlineConfig = OnlineConfig()
    fs: FsConfig = FsConfig()
    device_events: DeviceEventsConfig = DeviceEventsConfig()
    notify: NotifyConfig = NotifyConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to ~/.config/panorama/config.yaml.
            A missing default file means built-in defaults; an explicit path
            that does not exist is an error.

    Returns:
        Parsed Settings instance.

    Raises:
        ConfigError: The file is unreadable, not valid YAML or fails validation.
    """
    global _settings  # noqa: PLW0603

    if path is not None and not Path(path).is_file():
        raise ConfigError(f"config path '{path}' is not a file")
    config_path = Path(path) if path else default_config_path()

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"failed to read config file at '{config_path}': {exc}") from exc
        if isinstance(raw, dict):
            data = raw

    try:
        _settings = Settings(**data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config file at '{config_path}': {exc}") from exc
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None


def dump_default_settings() -> str:
    """Render the built-in defaults as a YAML document."""
    data = Settings().model_dump(mode="json", by_alias=True)
    # Secrets are dumped masked; an empty webhook is the real default.
    data["notify"]["discord"]["webhook_url"] = ""
    content = yaml.safe_dump(data, sort_keys=False)
    return f"# Default config for panorama\n\n{content}"
