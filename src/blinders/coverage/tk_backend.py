"""Tkinter coverage backend.

Each coverage region is an undecorated, always-on-top ``Toplevel`` filled
with the coverage color. Tk runs on the asyncio loop's thread: ``TkPump``
services Tk's event queue from a task instead of blocking in
``mainloop()``. On macOS each region's NSWindow is additionally raised to
the screen-saver level and joined to every Space (see ``macos``).
"""

from __future__ import annotations

import asyncio
import logging
import sys
import tkinter as tk
from typing import Callable

from blinders.coverage.base import CoverageError, CoverageRegion, RegionFactory
from blinders.domain.models import Rect, RegionRole

logger = logging.getLogger(__name__)

DEFAULT_PUMP_INTERVAL = 0.02

Elevator = Callable[[tk.Toplevel], None]


def platform_elevator() -> Elevator | None:
    """The native raise for this platform, if Tk's ``-topmost`` is not enough."""
    if sys.platform == "darwin":
        from blinders.coverage.macos import elevate
        return elevate
    return None


class TkRegion(CoverageRegion):
    """A coverage region backed by a Tk ``Toplevel``.

    A region with no area is never mapped: Tk cannot show a zero-sized
    window, and growing it would put pixels inside the opening. It stays
    withdrawn but alive.
    """

    def __init__(
        self,
        window: tk.Toplevel,
        role: RegionRole,
        bounds: Rect,
        elevate: Elevator | None = None,
    ) -> None:
        super().__init__(role, bounds)
        self._window: tk.Toplevel | None = window
        self._elevate = elevate

    @property
    def is_alive(self) -> bool:
        if self._window is None:
            return False
        return bool(self._window.winfo_exists())

    @property
    def is_mapped(self) -> bool:
        return self.bounds.area > 0

    def show(self) -> None:
        if self._window is None:
            raise CoverageError(f"{self!r} was already destroyed")
        if not self.is_mapped:
            logger.debug("Region %s is empty; left unmapped", self.role.value)
            return
        self._window.deiconify()
        self._commit_geometry()
        # Content is ready once pending redraws and geometry changes are flushed.
        self._window.update_idletasks()
        self._raise_native()

    def assert_topmost(self) -> None:
        if self._window is None or not self.is_mapped:
            return
        self._window.attributes("-topmost", True)
        self._window.lift()
        self._commit_geometry()
        self._raise_native()

    def destroy(self) -> None:
        window, self._window = self._window, None
        if window is None:
            return
        try:
            window.destroy()
        except tk.TclError as e:
            logger.debug("Region %s already gone: %s", self.role.value, e)

    def _commit_geometry(self) -> None:
        b = self.bounds
        self._window.geometry(f"{b.width}x{b.height}{b.x:+d}{b.y:+d}")

    def _raise_native(self) -> None:
        if self._elevate is not None:
            self._elevate(self._window)


class TkRegionFactory(RegionFactory):
    """Creates Tk coverage regions as children of one hidden root."""

    def __init__(
        self,
        root: tk.Tk,
        color: str = "#4a4a4a",
        hint_color: str = "#2b2b2b",
        elevate: Elevator | None = None,
    ) -> None:
        self._root = root
        self._color = color
        self._hint_color = hint_color
        self._elevate = elevate if elevate is not None else platform_elevator()

    def create_region(
        self,
        role: RegionRole,
        bounds: Rect,
        hint: str | None = None,
    ) -> TkRegion:
        try:
            window = tk.Toplevel(self._root)
            window.withdraw()
            # The native layer finds the region's NSWindow by this title.
            window.title(f"blinders-{role.value}-{id(window):x}")
            window.overrideredirect(True)
            window.configure(background=self._color, takefocus=0, cursor="arrow")
            self._make_non_interactive(window)
            if hint:
                label = tk.Label(
                    window,
                    text=hint,
                    background=self._color,
                    foreground=self._hint_color,
                    font=("Menlo", 14),
                    takefocus=0,
                )
                label.pack(side="bottom", pady=18)
        except tk.TclError as e:
            raise CoverageError(f"Cannot create {role.value} region: {e}") from e

        region = TkRegion(window, role, bounds, elevate=self._elevate)
        logger.debug("Created %r", region)
        return region

    def _make_non_interactive(self, window: tk.Toplevel) -> None:
        """Keep the region from taking focus or clicks where the platform allows it."""
        try:
            if sys.platform == "darwin":
                window.tk.call(
                    "::tk::unsupported::MacWindowStyle",
                    "style",
                    window._w,
                    "help",
                    "noActivates ignoreClicks",
                )
            elif sys.platform == "win32":
                window.attributes("-disabled", True)
            else:
                window.attributes("-type", "dock")
        except tk.TclError as e:
            logger.debug("Non-interactive window style unavailable: %s", e)


class TkPump:
    """Services the Tk event queue from the asyncio loop."""

    def __init__(self, root: tk.Tk, interval: float = DEFAULT_PUMP_INTERVAL) -> None:
        self._root = root
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            try:
                self._root.update()
            except tk.TclError as e:
                logger.warning("Tk pump stopped: %s", e)
                return
            await asyncio.sleep(self._interval)


def create_root() -> tk.Tk:
    """Create the hidden Tk root that owns all coverage windows."""
    root = tk.Tk()
    root.withdraw()
    root.title("blinders")
    return root
