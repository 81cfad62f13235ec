"""Display geometry backend built on ``screeninfo``.

screeninfo enumerates monitors on every desktop platform but does not
report the work area. On macOS the work area comes from AppKit's
visible frame; elsewhere it is the primary monitor's bounds minus
configured insets.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable

from screeninfo import ScreenInfoError, get_monitors

from blinders.config.settings import DisplayConfig
from blinders.display.base import DisplayError, DisplayService
from blinders.domain.models import Rect

logger = logging.getLogger(__name__)

WorkAreaSource = Callable[[], Rect | None]


def flip_cocoa_rect(rect: Any, primary_frame: Any) -> Rect:
    """Convert a Cocoa rect (origin bottom-left of the primary screen) to top-left."""
    top = primary_frame.size.height - (rect.origin.y + rect.size.height)
    return Rect(
        x=round(rect.origin.x),
        y=round(top),
        width=round(rect.size.width),
        height=round(rect.size.height),
    )


def platform_work_area() -> WorkAreaSource | None:
    """The native work-area query for this platform, if there is one."""
    if sys.platform == "darwin":
        from blinders.display.macos import primary_visible_frame
        return primary_visible_frame
    return None


class ScreenInfoDisplay(DisplayService):
    """Primary display geometry via screeninfo."""

    def __init__(
        self,
        config: DisplayConfig | None = None,
        work_area_source: WorkAreaSource | None = None,
    ) -> None:
        self._config = config or DisplayConfig()
        self._work_area_source = (
            work_area_source if work_area_source is not None else platform_work_area()
        )

    async def primary_bounds(self) -> Rect:
        try:
            monitors = get_monitors()
        except ScreenInfoError as e:
            raise DisplayError(f"Cannot enumerate monitors: {e}") from e
        if not monitors:
            raise DisplayError("No monitors found")

        primary = next((m for m in monitors if m.is_primary), monitors[0])
        return Rect(x=primary.x, y=primary.y, width=primary.width, height=primary.height)

    async def primary_work_area(self) -> Rect:
        bounds = await self.primary_bounds()
        if self._work_area_source is not None:
            work = self._work_area_source()
            if work is not None and work.area > 0:
                return work.clamped_to(bounds)
            logger.warning("Native work area unavailable, using configured insets")
        return self._inset(bounds)

    def _inset(self, bounds: Rect) -> Rect:
        c = self._config
        return Rect(
            x=bounds.x + c.inset_left,
            y=bounds.y + c.inset_top,
            width=max(0, bounds.width - c.inset_left - c.inset_right),
            height=max(0, bounds.height - c.inset_top - c.inset_bottom),
        )
