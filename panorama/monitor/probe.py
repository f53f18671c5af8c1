"""Probe evaluator — bounded retry-with-delay over an ordered list of checks."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

import structlog

from panorama.core.exceptions import ConfigError, ProbeError

logger = structlog.stdlib.get_logger()

CheckT = TypeVar("CheckT")

SleepFn = Callable[[float], Awaitable[None]]


class ProbeEvaluator(Generic[CheckT]):
    """Decides whether a binary condition holds for this tick.

    Checks are tried in order, wrapping around to the first one when the
    list is exhausted. The first successful check wins. Every failed attempt
    counts against the budget of ``retry_count + 1`` attempts, with a fixed
    ``retry_interval_secs`` pause between attempts.

    Usage::

        evaluator = ProbeEvaluator(config.urls, probe, retry_count=2)
        reachable = await evaluator.evaluate()
    """

    def __init__(
        self,
        checks: Sequence[CheckT],
        probe: Callable[[CheckT], Awaitable[None]],
        retry_count: int = 2,
        retry_interval_secs: float = 5.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if not checks:
            raise ConfigError("at least one check must be configured")
        if retry_count < 0:
            raise ConfigError("retry_count must not be negative")
        self._checks = list(checks)
        self._probe = probe
        self._retry_count = retry_count
        self._retry_interval_secs = retry_interval_secs
        self._sleep = sleep
        self._last_attempts = 0

    @property
    def last_attempts(self) -> int:
        """Number of probe attempts made by the most recent evaluation."""
        return self._last_attempts

    async def evaluate(self) -> bool:
        """Run checks until one succeeds or the attempt budget is spent."""
        attempts = 0
        for check in itertools.cycle(self._checks):
            attempts += 1
            self._last_attempts = attempts
            try:
                await self._probe(check)
            except ProbeError as exc:
                logger.warning(
                    "probe_failed",
                    check=str(check),
                    attempt=attempts,
                    error=str(exc),
                )
            else:
                return True

            if attempts > self._retry_count:
                return False
            await self._sleep(self._retry_interval_secs)

        return False
