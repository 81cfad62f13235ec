"""Primary display work area from AppKit (macOS).

``NSScreen.visibleFrame`` leaves out the menu bar, which is taller on
displays with a camera notch, and the Dock wherever it is docked.
"""

from __future__ import annotations

import logging

from AppKit import NSScreen

from blinders.display.screen import flip_cocoa_rect
from blinders.domain.models import Rect

logger = logging.getLogger(__name__)


def primary_visible_frame() -> Rect | None:
    """The primary screen's visible frame in top-left coordinates, if known."""
    screens = NSScreen.screens()
    if not screens:
        logger.debug("AppKit reports no screens")
        return None
    # The first screen holds the menu bar and the coordinate origin.
    primary = screens[0]
    return flip_cocoa_rect(primary.visibleFrame(), primary.frame())
