"""Tests for the macOS defaults preference backend."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from blinders.preferences.base import PreferenceError
from blinders.preferences.macos_defaults import DEFAULTS, KILLALL, MacDefaultsPreferenceStore

RUN = "blinders.preferences.macos_defaults._run"
KEY = "_HIHideMenuBar"


class TestRead:
    """Test reading a boolean preference."""

    @pytest.mark.asyncio
    async def test_reads_global_value(self) -> None:
        with patch(RUN, AsyncMock(return_value=(0, "1", ""))) as run:
            assert await MacDefaultsPreferenceStore().read(KEY) is True
        run.assert_awaited_once_with(DEFAULTS, "read", "NSGlobalDomain", KEY)

    @pytest.mark.asyncio
    async def test_falls_back_to_current_host(self) -> None:
        replies = [(1, "", "does not exist"), (0, "0", "")]
        with patch(RUN, AsyncMock(side_effect=replies)) as run:
            assert await MacDefaultsPreferenceStore().read(KEY) is False
        assert run.await_args_list[1].args == (DEFAULTS, "-currentHost", "read", "NSGlobalDomain", KEY)

    @pytest.mark.asyncio
    async def test_unset_is_unknown(self) -> None:
        with patch(RUN, AsyncMock(return_value=(1, "", "does not exist"))):
            assert await MacDefaultsPreferenceStore().read(KEY) is None

    @pytest.mark.asyncio
    async def test_non_boolean_is_unknown(self) -> None:
        with patch(RUN, AsyncMock(return_value=(0, "maybe", ""))):
            assert await MacDefaultsPreferenceStore().read(KEY) is None


class TestWrite:
    """Test writing a boolean preference."""

    @pytest.mark.asyncio
    async def test_writes_both_domains_and_restarts_ui(self) -> None:
        with patch(RUN, AsyncMock(return_value=(0, "", ""))) as run:
            await MacDefaultsPreferenceStore().write(KEY, True)
        calls = [c.args for c in run.await_args_list]
        assert calls == [
            (DEFAULTS, "write", "NSGlobalDomain", KEY, "-bool", "true"),
            (DEFAULTS, "-currentHost", "write", "NSGlobalDomain", KEY, "-bool", "true"),
            (KILLALL, "Dock"),
            (KILLALL, "SystemUIServer"),
        ]

    @pytest.mark.asyncio
    async def test_global_failure_raises(self) -> None:
        with patch(RUN, AsyncMock(return_value=(1, "", "permission denied"))):
            with pytest.raises(PreferenceError, match="permission denied"):
                await MacDefaultsPreferenceStore().write(KEY, False)

    @pytest.mark.asyncio
    async def test_current_host_failure_tolerated(self) -> None:
        replies = [(0, "", ""), (1, "", "nope"), (0, "", ""), (0, "", "")]
        with patch(RUN, AsyncMock(side_effect=replies)):
            await MacDefaultsPreferenceStore().write(KEY, False)
