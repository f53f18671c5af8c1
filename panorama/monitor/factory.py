"""Convenience factory for wiring the notification stack."""

from __future__ import annotations

from panorama.core.config import NotifyConfig
from panorama.core.exceptions import ConfigError
from panorama.monitor.notifier import Notifier
from panorama.monitor.sinks import DiscordWebhookSink, NotificationSink, NotifySendSink


def create_sink(config: NotifyConfig) -> NotificationSink:
    """Build the notification sink selected by ``notify.backend``."""
    if config.backend == "discord":
        if not config.discord.webhook_url.get_secret_value():
            raise ConfigError("'notify.discord.webhook_url' is required for the discord backend")
        return DiscordWebhookSink(config.discord, timeout_secs=config.send_timeout_secs)
    return NotifySendSink(
        app_name=config.app_name,
        command=config.command,
        timeout_secs=config.send_timeout_secs,
    )


def create_notifier(
    config: NotifyConfig,
    sink: NotificationSink | None = None,
) -> Notifier:
    """Build a notifier around *sink*, or the sink named in config."""
    return Notifier(
        sink=sink or create_sink(config),
        queue_size=config.queue_size,
    )
