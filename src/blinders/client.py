"""HTTP client for the blinders control API.

Used by the CLI subcommands to talk to a running ``blinders serve``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from blinders.domain.models import EndReason, EndResult, SessionStatus, StartResult

logger = logging.getLogger(__name__)


class ControlClient:
    """Sends commands to the local control API.

    Example usage::

        async with ControlClient("http://127.0.0.1:8765") as client:
            apps = await client.list_apps()
            result = await client.start_session("Notes", 25)
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8765",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client and verify the server is up."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.debug("Connected to control API at %s", self._base_url)
        except Exception as e:
            await self._client.aclose()
            self._client = None
            raise ControlClientError(f"Failed to connect to control API: {e}") from e

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def list_apps(self) -> list[str]:
        data = await self._request("GET", "/apps")
        if not data.get("ok"):
            raise ControlClientError(f"Listing apps failed: {data.get('error')}")
        return list(data.get("items", []))

    async def start_session(self, app: str, duration_min: float | str | None = None) -> StartResult:
        data = await self._request(
            "POST", "/session/start", {"app": app, "duration_min": duration_min}
        )
        return StartResult.model_validate(data)

    async def end_session(self, reason: EndReason = EndReason.MANUAL) -> EndResult:
        data = await self._request("POST", "/session/end", {"reason": reason.value})
        return EndResult.model_validate(data)

    async def status(self) -> SessionStatus:
        return SessionStatus.model_validate(await self._request("GET", "/session"))

    async def last_end_reason(self) -> EndReason | None:
        data = await self._request("GET", "/session/last-end-reason")
        reason = data.get("reason")
        return EndReason(reason) if reason else None

    async def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        if self._client is None:
            raise ControlClientError("Not connected to control API")
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise ControlClientError(f"{method} {path} failed: {e}") from e

    async def __aenter__(self) -> ControlClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class ControlClientError(Exception):
    """Raised when the control API cannot be reached or rejects a request."""
