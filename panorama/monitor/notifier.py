"""Central notifier — renders alerts and dedups them per group.

All monitors push :class:`PreparedAlert` objects onto one queue. A single
consumer (:meth:`Notifier.run`) owns the ``group → handle`` map, so the map
is never touched concurrently.
"""

from __future__ import annotations

import asyncio

import structlog

from panorama.core.exceptions import NotifyError
from panorama.core.types import SEVERITY_URGENCY, PreparedAlert, render
from panorama.monitor.sinks import NotificationSink
from panorama.monitor.types import NotificationRequest

# Dedicated structured logger for alert decisions.
alert_logger = structlog.stdlib.get_logger("alert_log")

logger = structlog.stdlib.get_logger()


def build_request(alert: PreparedAlert, replace_id: str | None = None) -> NotificationRequest:
    """Render *alert* into a sink request."""
    template = alert.template
    summary, message = render(template, alert.variables)
    expire_ms = (
        int(template.expire_after_secs * 1000)
        if template.expire_after_secs is not None
        else None
    )
    return NotificationRequest(
        summary=summary,
        message=message,
        severity=template.severity,
        urgency=SEVERITY_URGENCY[template.severity],
        expire_ms=expire_ms,
        replace_id=replace_id,
    )


class Notifier:
    """Serialized, group-keyed notification dispatcher.

    - At most one live notification per group: a known group handle is
      passed to the sink as ``replace_id``.
    - Failed deliveries are logged and dropped; the handle map is left as is.

    Usage::

        notifier = Notifier(NotifySendSink())
        task = asyncio.create_task(notifier.run())
        await notifier.notify(template.prepare("panorama.battery_status", {}))
    """

    def __init__(self, sink: NotificationSink, queue_size: int = 100) -> None:
        self._sink = sink
        self._queue: asyncio.Queue[PreparedAlert] = asyncio.Queue(maxsize=queue_size)
        self._handles: dict[str, str] = {}
        self._sent_count = 0
        self._failed_count = 0

    # ── Properties ────────────────────────────────────────────────

    @property
    def handles(self) -> dict[str, str]:
        """Read-only copy of the group → handle map."""
        return dict(self._handles)

    @property
    def sent_count(self) -> int:
        return self._sent_count

    @property
    def failed_count(self) -> int:
        return self._failed_count

    # ── Producer side ─────────────────────────────────────────────

    async def notify(self, alert: PreparedAlert) -> None:
        """Queue an alert for delivery (waits while the queue is full)."""
        await self._queue.put(alert)

    async def join(self) -> None:
        """Wait until every queued alert has been processed."""
        await self._queue.join()

    # ── Consumer side ─────────────────────────────────────────────

    async def run(self) -> None:
        """Deliver queued alerts forever, in the order received."""
        logger.info("notifier_started", sink=type(self._sink).__name__)
        while True:
            alert = await self._queue.get()
            try:
                await self.deliver(alert)
            except NotifyError as exc:
                self._failed_count += 1
                logger.error(
                    "notification_failed",
                    group=alert.group,
                    summary=alert.template.summary,
                    error=str(exc),
                )
            finally:
                self._queue.task_done()

    async def deliver(self, alert: PreparedAlert) -> str:
        """Render and send one alert, replacing the group's previous one.

        Only the :meth:`run` loop should call this outside of tests.
        """
        request = build_request(alert, replace_id=self._handles.get(alert.group))
        alert_logger.info(
            "alert",
            group=alert.group,
            severity=request.severity.value,
            summary=request.summary,
            message=request.message,
            replace_id=request.replace_id,
        )
        handle = await self._sink.send(request)
        self._handles[alert.group] = handle
        self._sent_count += 1
        return handle

    async def close(self) -> None:
        try:
            await self._sink.close()
        except Exception:
            logger.exception("sink_close_error", sink=type(self._sink).__name__)
