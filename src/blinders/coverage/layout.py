"""Coverage layout: where the five regions go.

Pure function from (display bounds, opening) to the region rectangles.
Together with the opening the regions tile the display with no gaps;
adjoining regions may overlap by ``overlap`` pixels to hide rounding
slivers, but no region ever reaches into the opening.
"""

from __future__ import annotations

from blinders.domain.models import Rect, RegionRole

DEFAULT_CAP_HEIGHT = 6
DEFAULT_OVERLAP = 2


def plan_regions(
    full: Rect,
    opening: Rect,
    cap_height: int = DEFAULT_CAP_HEIGHT,
    overlap: int = DEFAULT_OVERLAP,
) -> dict[RegionRole, Rect]:
    """Lay out cap, top, bottom, left and right around ``opening``.

    ``opening`` must already lie within ``full``.
    """
    # The cap masks OS chrome seams at the very top; it stops short of the opening.
    cap_h = max(0, min(cap_height, opening.y - full.y))
    cap = Rect(x=full.x, y=full.y, width=full.width, height=cap_h)

    top_y = max(full.y, cap.bottom - overlap)
    top = Rect(x=full.x, y=top_y, width=full.width, height=max(0, opening.y - top_y))

    bottom = Rect(
        x=full.x,
        y=opening.bottom,
        width=full.width,
        height=max(0, full.bottom - opening.bottom),
    )

    # Side regions bleed into top and bottom, never sideways into the opening.
    side_y = max(full.y, opening.y - overlap)
    side_bottom = min(full.bottom, opening.bottom + overlap)
    left = Rect(
        x=full.x,
        y=side_y,
        width=max(0, opening.x - full.x),
        height=side_bottom - side_y,
    )
    right = Rect(
        x=opening.right,
        y=side_y,
        width=max(0, full.right - opening.right),
        height=side_bottom - side_y,
    )

    return {
        RegionRole.CAP: cap,
        RegionRole.TOP: top,
        RegionRole.BOTTOM: bottom,
        RegionRole.LEFT: left,
        RegionRole.RIGHT: right,
    }
