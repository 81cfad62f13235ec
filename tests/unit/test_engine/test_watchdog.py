"""Tests for the InvariantWatchdog."""

from __future__ import annotations

import asyncio

import pytest

from blinders.domain.models import EndReason
from blinders.engine.watchdog import InvariantWatchdog


class TestCheck:
    """Test a single invariant evaluation."""

    def test_holds(self) -> None:
        assert InvariantWatchdog(lambda: 5, expected=5).check() is None

    @pytest.mark.parametrize("count", [0, 4, 6])
    def test_wrong_count(self, count: int) -> None:
        assert InvariantWatchdog(lambda: count, expected=5).check() is EndReason.WATCHDOG

    def test_unreadable_count(self) -> None:
        def broken() -> int:
            raise RuntimeError("window server gone")

        assert InvariantWatchdog(broken, expected=5).check() is EndReason.WATCHDOG_ERROR


class TestLoop:
    """Test the periodic watchdog task."""

    @pytest.mark.asyncio
    async def test_reports_violation_once(self) -> None:
        count = {"value": 5}
        reasons: list[EndReason] = []
        watchdog = InvariantWatchdog(lambda: count["value"], expected=5, interval=0.001)
        watchdog.start(reasons.append)
        await asyncio.sleep(0.01)
        assert reasons == []
        assert watchdog.is_running

        count["value"] = 4
        await asyncio.sleep(0.02)
        assert reasons == [EndReason.WATCHDOG]
        assert not watchdog.is_running

    @pytest.mark.asyncio
    async def test_stop(self) -> None:
        reasons: list[EndReason] = []
        watchdog = InvariantWatchdog(lambda: 0, expected=5, interval=0.05)
        watchdog.start(reasons.append)
        watchdog.stop()
        await asyncio.sleep(0.08)
        assert reasons == []
        assert not watchdog.is_running
