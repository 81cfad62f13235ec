"""Abstract base class for window control.

All window control backends must conform to this interface, so the
engine can pin a target application's front window without knowing how
the host exposes window attributes (AppleScript, accessibility APIs, a
window manager IPC socket, a test double).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from blinders.domain.models import Rect

logger = logging.getLogger(__name__)


class WindowControl(ABC):
    """Abstract interface for querying and mutating application windows.

    Every method is a coroutine because backends talk to the host through
    subprocesses or IPC. Failures raise WindowControlError; backends never
    swallow them.

    Example usage::

        control = AppleScriptWindowControl()
        await control.activate("Notes")
        if await control.has_window("Notes"):
            await control.set_bounds("Notes", Rect(x=432, y=191, width=1056, height=802))
    """

    @abstractmethod
    async def list_foreground_apps(self) -> list[str]:
        """Names of running applications with a user interface.

        Returns:
            Unique names in the order the host reports them.
        """
        ...

    @abstractmethod
    async def activate(self, app: str) -> None:
        """Bring ``app`` to the foreground."""
        ...

    @abstractmethod
    async def has_window(self, app: str) -> bool:
        """Whether ``app`` is running and has at least one window."""
        ...

    @abstractmethod
    async def set_bounds(self, app: str, rect: Rect) -> None:
        """Pin the front window of ``app`` to ``rect``.

        Implementations should also make the application frontmost, raise
        the window and un-minimize it, so that one call fully re-asserts
        the pinned state.
        """
        ...

    @abstractmethod
    async def get_bounds(self, app: str) -> Rect | None:
        """The actual frame of the front window of ``app``, or None if it has none."""
        ...


class WindowControlError(Exception):
    """Raised when a window control call fails."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend


def unique_names(names: list[str]) -> list[str]:
    """Strip, drop empties and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen[name] = None
    return list(seen)
