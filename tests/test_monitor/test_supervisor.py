"""Tests for Supervisor — fail-fast propagation and cancellation of siblings."""

from __future__ import annotations

import asyncio

import pytest

from panorama.core.exceptions import CollaboratorReadError, ConfigError
from panorama.monitor.supervisor import Supervisor


async def _forever(cancelled: list[str], name: str) -> None:
    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        cancelled.append(name)
        raise


class TestSupervisor:
    async def test_no_units_rejected(self) -> None:
        with pytest.raises(ConfigError):
            await Supervisor().run()

    async def test_unit_names(self) -> None:
        sup = Supervisor()
        cancelled: list[str] = []
        first = _forever(cancelled, "a")
        second = _forever(cancelled, "b")
        sup.add("a", first)
        sup.add("b", second)
        assert sup.unit_names == ["a", "b"]
        first.close()
        second.close()

    async def test_failure_propagates_and_cancels_rest(self) -> None:
        cancelled: list[str] = []

        async def failing() -> None:
            await asyncio.sleep(0)
            raise CollaboratorReadError("sysfs gone")

        sup = Supervisor()
        sup.add("power", failing())
        sup.add("online", _forever(cancelled, "online"))
        sup.add("notifier", _forever(cancelled, "notifier"))

        with pytest.raises(CollaboratorReadError, match="sysfs gone"):
            await sup.run()
        assert sorted(cancelled) == ["notifier", "online"]

    async def test_clean_exit_returns_and_cancels_rest(self) -> None:
        cancelled: list[str] = []

        async def finishes() -> None:
            await asyncio.sleep(0)

        sup = Supervisor()
        sup.add("fs", finishes())
        sup.add("notifier", _forever(cancelled, "notifier"))

        await sup.run()
        assert cancelled == ["notifier"]

    async def test_outer_cancellation_cancels_units(self) -> None:
        cancelled: list[str] = []
        sup = Supervisor()
        sup.add("a", _forever(cancelled, "a"))
        sup.add("b", _forever(cancelled, "b"))

        task = asyncio.create_task(sup.run())
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert sorted(cancelled) == ["a", "b"]
