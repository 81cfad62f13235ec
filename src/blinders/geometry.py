"""Opening geometry for a focus session.

Pure functions: given the primary display's work area and full bounds,
compute the viewport the target window is pinned into.
"""

from __future__ import annotations

from blinders.config.settings import GeometryConfig
from blinders.domain.models import Rect


def compute_opening(
    work_area: Rect,
    full_bounds: Rect,
    config: GeometryConfig | None = None,
) -> Rect:
    """Compute the opening rectangle for the target window.

    The opening is ``width_ratio`` x ``height_ratio`` of the work area,
    centered horizontally, and centered vertically in what remains of the
    work area once ``top_margin`` pixels are reserved at its top. The
    height is clamped so the opening never runs past the bottom of the
    full display, and the result always lies within ``full_bounds``.

    Args:
        work_area: Display bounds minus OS chrome (menu bar, dock, taskbar).
        full_bounds: Physical bounds of the same display.
        config: Ratios and margin. Defaults to 0.55 / 0.76 / 80px.
    """
    if config is None:
        config = GeometryConfig()

    width = round(work_area.width * config.width_ratio)
    height = round(work_area.height * config.height_ratio)

    x = work_area.x + (work_area.width - width) // 2

    usable_y = work_area.y + config.top_margin
    usable_height = work_area.height - config.top_margin
    y = usable_y + (usable_height - height) // 2

    height = max(0, min(height, full_bounds.bottom - y))

    return Rect(x=x, y=y, width=width, height=height).clamped_to(full_bounds)


def pad_measured(measured: Rect, margin: int, full_bounds: Rect) -> Rect:
    """Pad a measured window rect outward and keep it on the display.

    Window decorations and shadows are not fully controlled by the pin
    call, so the measured frame is grown by ``margin`` before it is used
    as the coverage opening.
    """
    return measured.padded(margin).clamped_to(full_bounds)
