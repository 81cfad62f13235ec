"""macOS ``defaults`` preference backend.

Values are written to both the global and the ``-currentHost`` domain,
since some macOS releases keep UI preferences per host, and the UI
services are restarted so the change takes effect.
"""

from __future__ import annotations

import asyncio
import logging

from blinders.preferences.base import PreferenceError, PreferenceStore

logger = logging.getLogger(__name__)

DEFAULTS = "/usr/bin/defaults"
KILLALL = "/usr/bin/killall"
UI_SERVICES = ("Dock", "SystemUIServer")


async def _run(*args: str) -> tuple[int, str, str]:
    """Run a command, returning (returncode, stdout, stderr)."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return 127, "", str(e)
    stdout, stderr = await proc.communicate()
    return (
        proc.returncode if proc.returncode is not None else 1,
        stdout.decode(errors="replace").strip(),
        stderr.decode(errors="replace").strip(),
    )


class MacDefaultsPreferenceStore(PreferenceStore):
    """Boolean preferences in one ``defaults`` domain."""

    def __init__(
        self,
        domain: str = "NSGlobalDomain",
        restart_services: tuple[str, ...] = UI_SERVICES,
    ) -> None:
        self._domain = domain
        self._restart_services = restart_services

    async def read(self, key: str) -> bool | None:
        for host_args in ((), ("-currentHost",)):
            code, out, _ = await _run(DEFAULTS, *host_args, "read", self._domain, key)
            if code == 0 and out in ("0", "1"):
                return out == "1"
        logger.debug("Preference %s %s is unset or unreadable", self._domain, key)
        return None

    async def write(self, key: str, value: bool) -> None:
        text = "true" if value else "false"
        code, _, err = await _run(DEFAULTS, "write", self._domain, key, "-bool", text)
        if code != 0:
            raise PreferenceError(f"defaults write {self._domain} {key} failed: {err}")

        code, _, err = await _run(
            DEFAULTS, "-currentHost", "write", self._domain, key, "-bool", text
        )
        if code != 0:
            logger.debug("Per-host write of %s failed: %s", key, err)

        for service in self._restart_services:
            await _run(KILLALL, service)
        logger.debug("Wrote %s %s=%s", self._domain, key, text)
