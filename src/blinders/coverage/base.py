"""Abstract base classes for coverage region surfaces.

A coverage region is an opaque, non-interactive, always-on-top rectangle
drawn over everything outside the opening. Backends (Tk windows, a
compositor layer, test fakes) implement these interfaces so the
coverage manager never depends on a particular toolkit.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from blinders.domain.models import Rect, RegionRole

logger = logging.getLogger(__name__)


class CoverageRegion(ABC):
    """One materialized coverage region.

    Lifecycle: created hidden by a RegionFactory, shown once, re-asserted
    as topmost any number of times, destroyed once. ``destroy()`` must be
    safe to call repeatedly.
    """

    def __init__(self, role: RegionRole, bounds: Rect) -> None:
        self._role = role
        self._bounds = bounds

    @property
    def role(self) -> RegionRole:
        return self._role

    @property
    def bounds(self) -> Rect:
        return self._bounds

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        """Whether the region's surface still exists on screen.

        Returns False once the region has been destroyed, by us or by
        anything outside the engine. May raise if the backend cannot tell.
        """
        ...

    @abstractmethod
    def show(self) -> None:
        """Map the region on screen and return once its content is ready."""
        ...

    @abstractmethod
    def assert_topmost(self) -> None:
        """Re-apply the always-on-top level and raise the region.

        Some display servers silently drop the topmost flag after show or
        load events, so the coverage manager calls this repeatedly. It must
        be idempotent and cheap.
        """
        ...

    @abstractmethod
    def destroy(self) -> None:
        """Release the region's surface immediately."""
        ...

    def __repr__(self) -> str:
        b = self._bounds
        return f"<{type(self).__name__} {self._role.value} {b.x},{b.y} {b.width}x{b.height}>"


class RegionFactory(ABC):
    """Creates coverage regions for one backend."""

    @abstractmethod
    def create_region(
        self,
        role: RegionRole,
        bounds: Rect,
        hint: str | None = None,
    ) -> CoverageRegion:
        """Create a hidden, non-interactive region covering ``bounds``.

        Args:
            role: Which of the five regions this is.
            bounds: Global screen rectangle to cover.
            hint: Optional text to render (the exit hint on the bottom region).

        Raises:
            CoverageError: If the surface cannot be created.
        """
        ...


class CoverageError(Exception):
    """Raised when coverage regions cannot be materialized."""
