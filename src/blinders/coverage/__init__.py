"""Coverage module for blinders.

Frames the opening with five opaque, non-interactive, always-on-top
regions and keeps that set whole or empty.

Public API:
    CoverageRegion -- Abstract region surface
    RegionFactory -- Abstract region creator
    CoverageManager -- Owns the CoverageSet
    plan_regions -- Pure layout of the five regions
    TkRegionFactory -- Tkinter backend (lazy import)
"""

from blinders.coverage.base import CoverageError, CoverageRegion, RegionFactory
from blinders.coverage.layout import plan_regions
from blinders.coverage.manager import EXPECTED_REGIONS, CoverageManager

__all__ = [
    "CoverageError",
    "CoverageManager",
    "CoverageRegion",
    "EXPECTED_REGIONS",
    "RegionFactory",
    "TkRegionFactory",
    "plan_regions",
]


def __getattr__(name: str) -> type:
    """Lazy import for the Tk backend, which needs a display."""
    if name == "TkRegionFactory":
        from blinders.coverage.tk_backend import TkRegionFactory
        return TkRegionFactory
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
