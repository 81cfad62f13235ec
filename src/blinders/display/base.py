"""Abstract base class for display geometry queries."""

from __future__ import annotations

from abc import ABC, abstractmethod

from blinders.domain.models import Rect


class DisplayService(ABC):
    """Reports the geometry of the primary display.

    ``primary_bounds`` is the physical extent of the display; the work
    area is what remains once OS chrome (menu bar, dock, taskbar) is
    taken out.
    """

    @abstractmethod
    async def primary_bounds(self) -> Rect:
        ...

    @abstractmethod
    async def primary_work_area(self) -> Rect:
        ...


class DisplayError(Exception):
    """Raised when display geometry cannot be determined."""
