"""Tests for the PinningSupervisor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from blinders.domain.models import EndReason, Rect
from blinders.engine.pinning import PinningSupervisor
from blinders.windows.base import WindowControlError

OPENING = Rect(x=432, y=191, width=1056, height=802)


class TestTick:
    """Test a single enforcement pass."""

    @pytest.mark.asyncio
    async def test_pins_window(self, control) -> None:
        supervisor = PinningSupervisor(control)
        assert await supervisor.tick("Notes", OPENING, OPENING) is None
        assert control.bounds["Notes"] == OPENING

    @pytest.mark.asyncio
    async def test_app_closed_checked_before_pin(self, control) -> None:
        control.apps["Notes"] = 0
        supervisor = PinningSupervisor(control)
        assert await supervisor.tick("Notes", OPENING, OPENING) is EndReason.APP_CLOSED
        assert control.count("set_bounds") == 0

    @pytest.mark.asyncio
    async def test_pin_failed_after_max_failures(self, control) -> None:
        control.fail_set_bounds = True
        supervisor = PinningSupervisor(control, max_consecutive_failures=5)
        for expected in range(1, 5):
            assert await supervisor.tick("Notes", OPENING, OPENING) is None
            assert supervisor.consecutive_failures == expected
        assert await supervisor.tick("Notes", OPENING, OPENING) is EndReason.PIN_FAILED

    @pytest.mark.asyncio
    async def test_success_resets_failures(self, control) -> None:
        supervisor = PinningSupervisor(control)
        control.fail_set_bounds = True
        for _ in range(4):
            await supervisor.tick("Notes", OPENING, OPENING)
        control.fail_set_bounds = False
        await supervisor.tick("Notes", OPENING, OPENING)
        assert supervisor.consecutive_failures == 0

    @pytest.mark.asyncio
    async def test_has_window_error_counts_as_failure(self) -> None:
        control = AsyncMock()
        control.has_window.side_effect = WindowControlError("osascript timed out")
        supervisor = PinningSupervisor(control, max_consecutive_failures=2)
        assert await supervisor.tick("Notes", OPENING, OPENING) is None
        assert await supervisor.tick("Notes", OPENING, OPENING) is EndReason.PIN_FAILED

    @pytest.mark.asyncio
    async def test_remeasure_reads_bounds(self, control) -> None:
        supervisor = PinningSupervisor(control, remeasure=True)
        control.measured = Rect(x=0, y=0, width=100, height=100)
        assert await supervisor.tick("Notes", OPENING, OPENING) is None
        assert control.count("get_bounds") == 1


class TestMeasureBounds:
    """Test reading back the pinned frame."""

    @pytest.mark.asyncio
    async def test_returns_none_on_error(self) -> None:
        control = AsyncMock()
        control.get_bounds.side_effect = WindowControlError("no access")
        supervisor = PinningSupervisor(control)
        assert await supervisor.measure_bounds("Notes") is None

    @pytest.mark.asyncio
    async def test_invalid_frame_is_unavailable(self) -> None:
        def negative_size(app: str) -> Rect:
            return Rect(x=0, y=0, width=-40, height=300)

        control = AsyncMock()
        control.get_bounds.side_effect = negative_size
        supervisor = PinningSupervisor(control)
        assert await supervisor.measure_bounds("Notes") is None

    @pytest.mark.asyncio
    async def test_empty_frame_is_unavailable(self, control) -> None:
        control.measured = Rect(x=432, y=191, width=0, height=802)
        supervisor = PinningSupervisor(control)
        assert await supervisor.measure_bounds("Notes") is None


class TestEnforcementLoop:
    """Test the periodic enforcement task."""

    @pytest.mark.asyncio
    async def test_escalates_once_and_stops(self, control) -> None:
        control.fail_set_bounds = True
        supervisor = PinningSupervisor(control, interval=0.001, max_consecutive_failures=3)
        reasons: list[EndReason] = []
        supervisor.start("Notes", OPENING, OPENING, reasons.append)
        for _ in range(100):
            if reasons:
                break
            await asyncio.sleep(0.005)
        await asyncio.sleep(0.02)
        assert reasons == [EndReason.PIN_FAILED]
        assert not supervisor.is_enforcing
        assert control.count("set_bounds") == 3

    @pytest.mark.asyncio
    async def test_stop_cancels_and_resets(self, control) -> None:
        supervisor = PinningSupervisor(control, interval=0.001)
        supervisor.start("Notes", OPENING, OPENING, lambda reason: None)
        await asyncio.sleep(0.01)
        assert supervisor.is_enforcing
        supervisor.stop()
        assert not supervisor.is_enforcing
        assert supervisor.consecutive_failures == 0
        calls = control.count("set_bounds")
        await asyncio.sleep(0.01)
        assert control.count("set_bounds") == calls
