"""Display geometry module for blinders.

Public API:
    DisplayService -- Abstract base class
    DisplayError -- Raised when geometry is unavailable
    ScreenInfoDisplay -- screeninfo backend (lazy import)
    primary_visible_frame -- AppKit work area, macOS only (blinders.display.macos)
"""

from blinders.display.base import DisplayError, DisplayService

__all__ = ["DisplayError", "DisplayService", "ScreenInfoDisplay"]


def __getattr__(name: str) -> type:
    """Lazy import for the screeninfo backend."""
    if name == "ScreenInfoDisplay":
        from blinders.display.screen import ScreenInfoDisplay
        return ScreenInfoDisplay
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
