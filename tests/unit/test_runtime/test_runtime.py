"""Tests for the serve runtime's picker and crash handling."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from blinders.config.settings import PickerConfig, Settings
from blinders.domain.models import EndReason
from blinders.runtime import Runtime


def _settings(command: list[str] | None) -> Settings:
    return Settings(picker=PickerConfig(command=command))


class TestPicker:
    """Test launching the picker command."""

    @pytest.mark.asyncio
    async def test_launches_configured_command(self) -> None:
        runtime = Runtime(_settings(["open", "-a", "Picker"]))
        with patch("asyncio.create_subprocess_exec", AsyncMock()) as spawn:
            runtime.open_picker()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
        spawn.assert_awaited_once_with("open", "-a", "Picker")

    @pytest.mark.asyncio
    async def test_session_end_reopens_picker(self) -> None:
        runtime = Runtime(_settings(["picker"]))
        with patch("asyncio.create_subprocess_exec", AsyncMock()) as spawn:
            runtime._on_session_end(EndReason.TIMER)
            await asyncio.sleep(0)
            await asyncio.sleep(0)
        spawn.assert_awaited_once_with("picker")

    @pytest.mark.asyncio
    async def test_no_command_configured(self) -> None:
        runtime = Runtime(_settings(None))
        with patch("asyncio.create_subprocess_exec", AsyncMock()) as spawn:
            runtime.open_picker()
            await asyncio.sleep(0)
        spawn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_command_logged(self) -> None:
        runtime = Runtime(_settings(["no-such-picker"]))
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError())):
            runtime.open_picker()
            await asyncio.sleep(0)
            await asyncio.sleep(0)


class TestCrashHandling:
    """Test the loop exception handler."""

    @pytest.mark.asyncio
    async def test_unhandled_error_triggers_emergency_quit(self) -> None:
        runtime = Runtime(Settings())
        engine = MagicMock()
        engine.emergency_quit = AsyncMock()
        runtime._engine = engine

        loop = asyncio.get_running_loop()
        runtime._on_loop_exception(loop, {"message": "boom", "exception": RuntimeError("boom")})
        await asyncio.sleep(0)

        engine.emergency_quit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unhandled_error_before_engine_requests_quit(self) -> None:
        runtime = Runtime(Settings())
        runtime._on_loop_exception(asyncio.get_running_loop(), {"message": "boom"})
        assert runtime._quit.is_set()
