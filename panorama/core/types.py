"""Domain types shared by every monitor — alert templates and prepared alerts."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

_PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")


class Severity(StrEnum):
    """Alert severity as written in the config file."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class Urgency(StrEnum):
    """Urgency levels understood by the desktop notification surface."""

    LOW = "low"
    NORMAL = "normal"
    CRITICAL = "critical"


SEVERITY_URGENCY: dict[Severity, Urgency] = {
    Severity.INFO: Urgency.LOW,
    Severity.WARNING: Urgency.NORMAL,
    Severity.CRITICAL: Urgency.CRITICAL,
}


class AlertTemplate(BaseModel):
    """Immutable alert rule loaded from config.

    ``summary`` and ``message`` may contain ``${name}`` placeholders which are
    filled from the variables of a :class:`PreparedAlert`.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.INFO
    on_startup: bool = True
    repeat_after_secs: float | None = Field(default=None, gt=0)
    expire_after_secs: float | None = Field(default=None, gt=0)
    summary: str
    message: str | None = None

    def prepare(
        self,
        group: str,
        variables: dict[str, str] | None = None,
    ) -> PreparedAlert:
        """Bind this template to a dedup group and a set of variables."""
        return PreparedAlert(template=self, group=group, variables=dict(variables or {}))


class PreparedAlert(BaseModel):
    """One alert emission, consumed once by the notifier."""

    template: AlertTemplate
    group: str
    variables: dict[str, str] = Field(default_factory=dict)


def substitute(text: str, variables: dict[str, str]) -> str:
    """Replace ``${key}`` occurrences; unknown keys are left untouched."""

    def _replace(match: re.Match[str]) -> str:
        return variables.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(_replace, text)


def render(template: AlertTemplate, variables: dict[str, str]) -> tuple[str, str | None]:
    """Render the summary and optional message of *template*."""
    summary = substitute(template.summary, variables)
    message = substitute(template.message, variables) if template.message is not None else None
    return summary, message


class Phase(BaseModel):
    """Named inclusive sub-range of a 0–100 metric with its own alert policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    from_: int = Field(alias="from", ge=0, le=100)
    to: int = Field(ge=0, le=100)
    alert: AlertTemplate | None = None

    def contains(self, value: float) -> bool:
        return self.from_ <= value <= self.to
