"""Domain state machine — two-valued mode plus an optional graduated phase.

Every monitored domain is driven through the same shape:

* a binary *mode* (healthy / degraded) whose edges fire the
  activation / deactivation alerts exactly once, and
* while degraded, an optional classifier mapping the domain metric onto a
  :class:`~panorama.core.types.Phase` with enter / re-enter / repeat alerts.

The machine does no I/O; callers pass the observation and the current time
and get back the templates that should be emitted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from panorama.core.types import AlertTemplate, Phase

Classifier = Callable[[float | None], Phase | None]


@dataclass
class PhaseTransition:
    """Runtime record of the phase the domain currently sits in."""

    name: str
    entered_at: float
    last_notified_at: float | None = None


class DomainStateMachine:
    """Decides when a domain observation is worth an alert."""

    def __init__(
        self,
        alert_activated: AlertTemplate | None = None,
        alert_deactivated: AlertTemplate | None = None,
        classifier: Classifier | None = None,
    ) -> None:
        self._alert_activated = alert_activated
        self._alert_deactivated = alert_deactivated
        self._classifier = classifier
        self._degraded: bool | None = None
        self._degraded_since: float | None = None
        self._phase: PhaseTransition | None = None

    # ── Properties ────────────────────────────────────────────────

    @property
    def started(self) -> bool:
        """Whether at least one observation has been processed."""
        return self._degraded is not None

    @property
    def degraded(self) -> bool | None:
        """Current mode; None before the first observation."""
        return self._degraded

    @property
    def degraded_since(self) -> float | None:
        return self._degraded_since

    @property
    def phase(self) -> PhaseTransition | None:
        """Copy of the current phase record, if any."""
        return replace(self._phase) if self._phase is not None else None

    # ── Transitions ───────────────────────────────────────────────

    def step(
        self,
        degraded: bool,
        value: float | None,
        now: float,
    ) -> list[AlertTemplate]:
        """Feed one observation and return the alerts to emit, in order."""
        startup = not self.started
        alerts: list[AlertTemplate] = []

        if degraded != self._degraded:
            edge_alert = self._change_mode(degraded, now, startup)
            if edge_alert is not None:
                alerts.append(edge_alert)

        if not degraded or self._classifier is None:
            self._phase = None
            return alerts

        phase_alert = self._step_phase(self._classifier(value), now, startup)
        if phase_alert is not None:
            alerts.append(phase_alert)
        return alerts

    def _change_mode(
        self,
        degraded: bool,
        now: float,
        startup: bool,
    ) -> AlertTemplate | None:
        self._degraded = degraded
        self._degraded_since = now if degraded else None

        if startup:
            # First observation is a baseline; only a degraded start may alert.
            if degraded and self._alert_activated is not None and self._alert_activated.on_startup:
                return self._alert_activated
            return None

        return self._alert_activated if degraded else self._alert_deactivated

    def _step_phase(
        self,
        phase: Phase | None,
        now: float,
        startup: bool,
    ) -> AlertTemplate | None:
        current = self._phase

        if phase is None:
            self._phase = None
            return None

        if current is None or current.name != phase.name:
            self._phase = PhaseTransition(name=phase.name, entered_at=now)
            if phase.alert is None or (startup and not phase.alert.on_startup):
                return None
            return phase.alert

        # Same phase as before; only the repeat policy can fire.
        alert = phase.alert
        if alert is None or alert.repeat_after_secs is None:
            return None
        reference = (
            current.last_notified_at
            if current.last_notified_at is not None
            else current.entered_at
        )
        if now - reference < alert.repeat_after_secs:
            return None
        current.last_notified_at = now
        return alert
