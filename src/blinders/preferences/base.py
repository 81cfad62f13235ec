"""Abstract base class for system-wide preference access."""

from __future__ import annotations

from abc import ABC, abstractmethod


class PreferenceStore(ABC):
    """Reads and writes boolean system preferences.

    ``read`` is tri-state: True, False, or None when the value is unset
    or cannot be read.
    """

    @abstractmethod
    async def read(self, key: str) -> bool | None:
        ...

    @abstractmethod
    async def write(self, key: str, value: bool) -> None:
        """Write ``value`` and ask the host to apply it.

        Raises:
            PreferenceError: If the value cannot be written.
        """
        ...


class PreferenceError(Exception):
    """Raised when a preference cannot be written."""
