"""Notification sinks — notify-send and Discord webhook delivery."""

from __future__ import annotations

import abc
import asyncio
from typing import Any

import aiohttp
import structlog

from panorama.core.config import DiscordConfig
from panorama.core.exceptions import NotifyError
from panorama.core.types import Severity
from panorama.monitor.types import NotificationRequest

logger = structlog.stdlib.get_logger()

# Discord embed colours keyed by severity.
_DISCORD_COLORS: dict[Severity, int] = {
    Severity.INFO: 0x2ECC71,     # green
    Severity.WARNING: 0xF39C12,  # orange
    Severity.CRITICAL: 0xE74C3C, # red
}


class NotificationSink(abc.ABC):
    """Base class for the external notification surface."""

    @abc.abstractmethod
    async def send(self, request: NotificationRequest) -> str:
        """Show (or replace) a notification and return its handle.

        Raises:
            NotifyError: The notification could not be delivered.
        """

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class NotifySendSink(NotificationSink):
    """Shows desktop notifications through the ``notify-send`` program.

    ``--print-id`` makes notify-send print the notification id, which is fed
    back through ``--replace-id`` to update a notification in place.
    """

    def __init__(
        self,
        app_name: str = "Panorama",
        command: str = "notify-send",
        timeout_secs: float = 10.0,
    ) -> None:
        self._app_name = app_name
        self._command = command
        self._timeout_secs = timeout_secs

    def build_args(self, request: NotificationRequest) -> list[str]:
        args = [
            self._command,
            "--print-id",
            f"--app-name={self._app_name}",
            f"--urgency={request.urgency.value}",
        ]
        if request.expire_ms is not None:
            args.append(f"--expire-time={request.expire_ms}")
        if request.replace_id is not None:
            args.append(f"--replace-id={request.replace_id}")
        args.append("--")
        args.append(request.summary)
        if request.message is not None:
            args.append(request.message)
        return args

    async def send(self, request: NotificationRequest) -> str:
        args = self.build_args(request)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise NotifyError(f"could not execute '{self._command}': {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self._timeout_secs)
        except TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise NotifyError(
                f"'{self._command}' did not finish within {self._timeout_secs}s"
            ) from exc

        out = stdout.decode(errors="replace").strip()
        if proc.returncode != 0:
            err = stderr.decode(errors="replace").strip()
            raise NotifyError(
                f"'{self._command}' exited with status {proc.returncode}: {out} {err}".rstrip()
            )

        try:
            return str(int(out))
        except ValueError as exc:
            raise NotifyError(f"could not parse notification ID from {out!r}") from exc


class DiscordWebhookSink(NotificationSink):
    """Posts alerts to a Discord webhook as colour-coded embeds.

    Messages are created with ``?wait=true`` so Discord returns the message
    id; replacing a notification edits that message in place.
    """

    def __init__(self, config: DiscordConfig, timeout_secs: float = 10.0) -> None:
        self._webhook_url = config.webhook_url.get_secret_value().rstrip("/")
        self._username = config.username
        self._timeout = aiohttp.ClientTimeout(total=timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def build_payload(self, request: NotificationRequest) -> dict[str, Any]:
        embed: dict[str, Any] = {
            "title": request.summary,
            "color": _DISCORD_COLORS.get(request.severity, 0x95A5A6),
            "footer": {"text": request.severity.value.upper()},
        }
        if request.message:
            embed["description"] = request.message
        return {"username": self._username, "embeds": [embed]}

    async def send(self, request: NotificationRequest) -> str:
        if not self._webhook_url:
            raise NotifyError("discord webhook URL is not configured")

        payload = self.build_payload(request)
        if request.replace_id is not None:
            url = f"{self._webhook_url}/messages/{request.replace_id}"
            message_id = await self._request("PATCH", url, payload)
            if message_id is not None:
                return message_id
            # The message was deleted on the Discord side; post a fresh one.
            logger.info("discord_message_missing", message_id=request.replace_id)

        message_id = await self._request("POST", f"{self._webhook_url}?wait=true", payload)
        if message_id is None:
            raise NotifyError("discord webhook returned 404")
        return message_id

    async def _request(self, method: str, url: str, payload: dict[str, Any]) -> str | None:
        """Send one webhook request; returns None on 404."""
        try:
            session = self._get_session()
            async with session.request(method, url, json=payload) as resp:
                if resp.status == 404:
                    return None
                if resp.status not in (200, 201):
                    body = await resp.text()
                    raise NotifyError(
                        f"discord webhook returned {resp.status}: {body[:200]}"
                    )
                data = await resp.json()
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise NotifyError(f"discord webhook request failed: {exc!r}") from exc
        except ValueError as exc:
            raise NotifyError(f"discord webhook returned a malformed body: {exc}") from exc

        message_id = data.get("id") if isinstance(data, dict) else None
        if not message_id:
            raise NotifyError("discord webhook response did not contain a message id")
        return str(message_id)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
