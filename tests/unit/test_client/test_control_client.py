"""Tests for the control API client."""

from __future__ import annotations

import httpx
import pytest

from blinders.api.server import create_app
from blinders.client import ControlClient, ControlClientError
from blinders.domain.models import EndReason, SessionState, StartError


def _asgi(engine) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_app(engine))


class TestControlClient:
    """Test the client against the real app and against failing transports."""

    def test_init_strips_trailing_slash(self) -> None:
        client = ControlClient("http://127.0.0.1:9000/")
        assert client._base_url == "http://127.0.0.1:9000"
        assert client._timeout == 30.0

    @pytest.mark.asyncio
    async def test_full_session(self, engine) -> None:
        async with engine:
            async with ControlClient(transport=_asgi(engine)) as client:
                assert await client.list_apps() == ["Notes", "Safari"]

                started = await client.start_session("Notes", 15)
                assert started.ok is True

                status = await client.status()
                assert status.state is SessionState.RUNNING
                assert status.coverage_size == 5

                ended = await client.end_session()
                assert ended.reason is EndReason.MANUAL
                assert await client.last_end_reason() is EndReason.MANUAL
                assert await client.last_end_reason() is None

    @pytest.mark.asyncio
    async def test_start_failure_returned(self, engine, control) -> None:
        control.apps["Notes"] = 0
        async with engine:
            async with ControlClient(transport=_asgi(engine)) as client:
                result = await client.start_session("Notes", "done")
        assert result.ok is False
        assert result.error is StartError.NO_WINDOWS

    @pytest.mark.asyncio
    async def test_connect_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = ControlClient(transport=httpx.MockTransport(refuse))
        with pytest.raises(ControlClientError, match="Failed to connect"):
            await client.connect()

    @pytest.mark.asyncio
    async def test_http_error_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/health":
                return httpx.Response(200, json={"status": "ok", "state": "idle"})
            return httpx.Response(500, json={"detail": "boom"})

        async with ControlClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ControlClientError, match="GET /session failed"):
                await client.status()

    @pytest.mark.asyncio
    async def test_list_apps_not_ok(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/health":
                return httpx.Response(200, json={"status": "ok", "state": "idle"})
            return httpx.Response(200, json={"ok": False, "items": [], "error": "not authorized"})

        async with ControlClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ControlClientError, match="not authorized"):
                await client.list_apps()

    @pytest.mark.asyncio
    async def test_requires_connect(self) -> None:
        with pytest.raises(ControlClientError, match="Not connected"):
            await ControlClient().status()
