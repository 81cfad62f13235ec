"""Window control module for blinders.

Queries and mutates the target application's windows through pluggable
backends.

Public API:
    WindowControl -- Abstract base class
    WindowControlError -- Raised by every backend on failure
    AppleScriptWindowControl -- macOS System Events backend
"""

from blinders.windows.base import WindowControl, WindowControlError

__all__ = ["AppleScriptWindowControl", "WindowControl", "WindowControlError"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that need a specific host."""
    if name == "AppleScriptWindowControl":
        from blinders.windows.applescript import AppleScriptWindowControl
        return AppleScriptWindowControl
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
