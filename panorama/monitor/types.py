"""Domain types for the notification side of the engine."""

from __future__ import annotations

from pydantic import BaseModel

from panorama.core.types import Severity, Urgency


class NotificationRequest(BaseModel):
    """Rendered alert ready for a notification sink."""

    summary: str
    message: str | None = None
    severity: Severity = Severity.INFO
    urgency: Urgency = Urgency.LOW
    expire_ms: int | None = None
    # Handle of the notification to replace, if the group already has one.
    replace_id: str | None = None
