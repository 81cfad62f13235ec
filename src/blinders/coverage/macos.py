"""AppKit window level and Space behavior for coverage regions (macOS).

Tk's ``-topmost`` floats a window above ordinary windows on the current
Space only. Coverage must also sit above full-screen apps and appear on
every Space, which takes settings on the region's own NSWindow.
"""

from __future__ import annotations

import logging
from typing import Any

from AppKit import (
    NSApplication,
    NSScreenSaverWindowLevel,
    NSWindowCollectionBehaviorCanJoinAllSpaces,
    NSWindowCollectionBehaviorFullScreenAuxiliary,
    NSWindowCollectionBehaviorIgnoresCycle,
    NSWindowCollectionBehaviorStationary,
)

logger = logging.getLogger(__name__)

COVERAGE_LEVEL = NSScreenSaverWindowLevel

COVERAGE_BEHAVIOR = (
    NSWindowCollectionBehaviorCanJoinAllSpaces
    | NSWindowCollectionBehaviorFullScreenAuxiliary
    | NSWindowCollectionBehaviorStationary
    | NSWindowCollectionBehaviorIgnoresCycle
)


def find_ns_window(title: str) -> Any | None:
    """The NSWindow Tk created for the toplevel titled ``title``, once mapped."""
    for ns_window in NSApplication.sharedApplication().windows():
        if ns_window.title() == title:
            return ns_window
    return None


def raise_above_everything(ns_window: Any) -> None:
    ns_window.setLevel_(COVERAGE_LEVEL)
    ns_window.setCollectionBehavior_(COVERAGE_BEHAVIOR)
    ns_window.setIgnoresMouseEvents_(True)
    ns_window.setHidesOnDeactivate_(False)
    ns_window.orderFrontRegardless()


def elevate(window: Any) -> None:
    """Apply the coverage level and Space behavior to a Tk toplevel.

    Does nothing until Tk has created the backing NSWindow; the manager's
    delayed re-assertions apply it once the window exists.
    """
    title = window.title()
    ns_window = find_ns_window(title)
    if ns_window is None:
        logger.debug("No NSWindow yet for %s", title)
        return
    raise_above_everything(ns_window)
