"""System preference module for blinders.

Public API:
    PreferenceStore -- Abstract base class
    PreferenceError -- Raised when a write fails
    MacDefaultsPreferenceStore -- macOS ``defaults`` backend (lazy import)
"""

from blinders.preferences.base import PreferenceError, PreferenceStore

__all__ = ["MacDefaultsPreferenceStore", "PreferenceError", "PreferenceStore"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that need a specific host."""
    if name == "MacDefaultsPreferenceStore":
        from blinders.preferences.macos_defaults import MacDefaultsPreferenceStore
        return MacDefaultsPreferenceStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
