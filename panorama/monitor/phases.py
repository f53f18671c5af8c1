"""Phase classifier — ordered, non-overlapping inclusive ranges over a metric."""

from __future__ import annotations

from collections.abc import Sequence

from panorama.core.exceptions import ConfigError
from panorama.core.types import Phase


def validate_phases(phases: Sequence[Phase]) -> list[Phase]:
    """Check phase invariants in the given order.

    The input order is authoritative and nothing is sorted. Every phase must
    have ``from <= to``, a unique name, and start strictly after the previous
    phase ends (gaps are allowed).

    Raises:
        ConfigError: On the first violation, naming the offending phase.
    """
    if not phases:
        raise ConfigError("at least one phase must be defined")

    seen: set[str] = set()
    for index, phase in enumerate(phases):
        if phase.name in seen:
            raise ConfigError(f"Phase '{phase.name}' is defined multiple times")
        seen.add(phase.name)

        if phase.from_ > phase.to:
            raise ConfigError(
                f"Phase '{phase.name}' has invalid range: {phase.from_}..{phase.to}"
            )

        if index > 0:
            prev = phases[index - 1]
            if phase.from_ <= prev.to:
                raise ConfigError(
                    f"Phase '{phase.name}' has overlapping range with phase "
                    f"'{prev.name}': {phase.from_}..{phase.to}"
                )

    return list(phases)


class PhaseClassifier:
    """Maps a metric value to the phase whose range contains it.

    Phases are validated once at construction; :meth:`classify` assumes the
    invariants hold.
    """

    def __init__(self, phases: Sequence[Phase]) -> None:
        self._phases = validate_phases(phases)

    @property
    def phases(self) -> list[Phase]:
        return list(self._phases)

    def classify(self, value: float | None) -> Phase | None:
        """Return the first phase containing *value*, or None."""
        if value is None:
            return None
        for phase in self._phases:
            if phase.contains(value):
                return phase
        return None
