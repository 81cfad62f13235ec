"""AppleScript window control backend (macOS).

Drives System Events through ``osascript`` to list applications, raise
them, and read or force the position and size of their front window.
"""

from __future__ import annotations

import asyncio
import logging

from blinders.domain.models import Rect
from blinders.windows.base import WindowControl, WindowControlError, unique_names

logger = logging.getLogger(__name__)

OSASCRIPT = "/usr/bin/osascript"


def quote(value: str) -> str:
    """Quote a string as an AppleScript literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


async def run_osascript(script: str, executable: str = OSASCRIPT) -> str:
    """Run an AppleScript snippet and return its trimmed stdout.

    Raises:
        WindowControlError: If osascript cannot be started or exits non-zero.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            "-e",
            script,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise WindowControlError(f"Cannot run {executable}: {e}", backend="applescript") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        message = stderr.decode(errors="replace").strip() or f"exit status {proc.returncode}"
        raise WindowControlError(message, backend="applescript")
    return stdout.decode(errors="replace").strip()


class AppleScriptWindowControl(WindowControl):
    """Window control through System Events."""

    def __init__(self, executable: str = OSASCRIPT) -> None:
        self._executable = executable

    async def list_foreground_apps(self) -> list[str]:
        raw = await self._run(
            'tell application "System Events"\n'
            "  set appNames to (name of every application process where background only is false)\n"
            "end tell\n"
            'set text item delimiters to ","\n'
            "return appNames as text"
        )
        return unique_names(raw.split(","))

    async def activate(self, app: str) -> None:
        await self._run(f"tell application {quote(app)} to activate")
        logger.debug("Activated %s", app)

    async def has_window(self, app: str) -> bool:
        out = await self._run(
            'tell application "System Events"\n'
            f"  if not (exists application process {quote(app)}) then return \"NO\"\n"
            f"  tell application process {quote(app)}\n"
            '    if (count of windows) is 0 then return "NO"\n'
            '    return "YES"\n'
            "  end tell\n"
            "end tell"
        )
        return out == "YES"

    async def set_bounds(self, app: str, rect: Rect) -> None:
        logger.debug(
            "Pinning %s -> x=%d y=%d w=%d h=%d", app, rect.x, rect.y, rect.width, rect.height
        )
        out = await self._run(
            'tell application "System Events"\n'
            f"  if not (exists application process {quote(app)}) then return \"NOAPP\"\n"
            f"  tell application process {quote(app)}\n"
            '    if (count of windows) is 0 then return "NOWIN"\n'
            "    set frontmost to true\n"
            "    try\n"
            '      perform action "AXRaise" of window 1\n'
            "    end try\n"
            "    try\n"
            '      set value of attribute "AXMinimized" of window 1 to false\n'
            "    end try\n"
            f"    set position of window 1 to {{{rect.x}, {rect.y}}}\n"
            f"    set size of window 1 to {{{rect.width}, {rect.height}}}\n"
            '    return "OK"\n'
            "  end tell\n"
            "end tell"
        )
        if out != "OK":
            raise WindowControlError(f"Cannot pin {app}: {out}", backend="applescript")

    async def get_bounds(self, app: str) -> Rect | None:
        out = await self._run(
            'tell application "System Events"\n'
            f"  if not (exists application process {quote(app)}) then return \"NOWIN\"\n"
            f"  tell application process {quote(app)}\n"
            '    if (count of windows) is 0 then return "NOWIN"\n'
            "    set {px, py} to position of window 1\n"
            "    set {sw, sh} to size of window 1\n"
            '    return (px as text) & "," & (py as text) & "," & (sw as text) & "," & (sh as text)\n'
            "  end tell\n"
            "end tell"
        )
        if out == "NOWIN":
            return None
        try:
            x, y, width, height = (int(float(part)) for part in out.split(","))
            return Rect(x=x, y=y, width=width, height=height)
        except ValueError as e:
            raise WindowControlError(
                f"Unexpected bounds for {app}: {out!r}", backend="applescript"
            ) from e

    async def _run(self, script: str) -> str:
        return await run_osascript(script, executable=self._executable)
