"""Core domain models for the blinders focus lock engine.

These models represent the data flowing through a session: display and
window rectangles, the normalized session duration, the live session
record, and the tagged results handed back to the picker UI.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SESSION_MINUTES = 15.0
MIN_SESSION_MINUTES = 1.0


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Lifecycle state of the session engine."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    ENDING = "ending"


class DurationMode(str, enum.Enum):
    """Whether a session ends on a timer or only on request."""

    TIMED = "timed"
    INDEFINITE = "indefinite"


class EndReason(str, enum.Enum):
    """Why a session was torn down."""

    MANUAL = "manual"  # End-session hotkey or picker request
    TIMER = "timer"  # Timed session ran out
    APP_CLOSED = "app-closed"  # Target lost all of its windows
    PIN_FAILED = "pin-failed"  # Too many consecutive pin failures
    WATCHDOG = "watchdog"  # Coverage invariant violated
    WATCHDOG_ERROR = "watchdog-error"  # Coverage invariant could not be evaluated


class StartError(str, enum.Enum):
    """Tagged reasons a session failed to start."""

    NO_WINDOWS = "no-windows"
    MASK_FAILED = "mask-failed"
    MASK_MISSING = "mask-missing"
    CONTROL_FAILED = "control-failed"
    SESSION_ACTIVE = "session-active"


class RegionRole(str, enum.Enum):
    """The five coverage regions, in creation order."""

    CAP = "cap"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class Rect(BaseModel):
    """An integer pixel rectangle in global screen coordinates.

    Origin at top-left. Zero-sized rectangles are allowed so degenerate
    coverage regions (e.g. an opening flush with the cap) stay representable.
    """

    model_config = ConfigDict(frozen=True)

    x: int = Field(description="Left edge x-coordinate in pixels")
    y: int = Field(description="Top edge y-coordinate in pixels")
    width: int = Field(ge=0, description="Width in pixels")
    height: int = Field(ge=0, description="Height in pixels")

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def contains(self, other: Rect) -> bool:
        """Whether ``other`` lies entirely inside this rectangle."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def intersection(self, other: Rect) -> Rect | None:
        """The overlapping rectangle, or None when the two do not overlap."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect(x=left, y=top, width=right - left, height=bottom - top)

    def padded(self, margin: int) -> Rect:
        """Grow the rectangle outward by ``margin`` pixels on every side."""
        return Rect(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + 2 * margin,
            height=self.height + 2 * margin,
        )

    def clamped_to(self, bounds: Rect) -> Rect:
        """Clip the rectangle so it lies within ``bounds``."""
        left = min(max(self.x, bounds.x), bounds.right)
        top = min(max(self.y, bounds.y), bounds.bottom)
        right = max(min(self.right, bounds.right), left)
        bottom = max(min(self.bottom, bounds.bottom), top)
        return Rect(x=left, y=top, width=right - left, height=bottom - top)


# ---------------------------------------------------------------------------
# Session Models
# ---------------------------------------------------------------------------


class SessionDuration(BaseModel):
    """Normalized session duration."""

    model_config = ConfigDict(frozen=True)

    mode: DurationMode
    minutes: float | None = Field(default=None, description="Set only for timed sessions")

    @property
    def seconds(self) -> float | None:
        return None if self.minutes is None else self.minutes * 60.0

    @classmethod
    def normalize(
        cls,
        value: Any,
        default_minutes: float = DEFAULT_SESSION_MINUTES,
        min_minutes: float = MIN_SESSION_MINUTES,
    ) -> SessionDuration:
        """Turn whatever the picker sent into a duration.

        ``None`` or the literal ``"done"`` (any case) means the session runs
        until ended. Anything numeric is timed and floored at ``min_minutes``;
        anything else, including NaN and infinities, falls back to
        ``default_minutes``.
        """
        if value is None:
            return cls(mode=DurationMode.INDEFINITE)
        if isinstance(value, str) and value.strip().lower() == "done":
            return cls(mode=DurationMode.INDEFINITE)

        try:
            minutes = float(value)
        except (TypeError, ValueError):
            return cls(mode=DurationMode.TIMED, minutes=default_minutes)
        if not math.isfinite(minutes):
            return cls(mode=DurationMode.TIMED, minutes=default_minutes)
        return cls(mode=DurationMode.TIMED, minutes=max(min_minutes, minutes))


class Session(BaseModel):
    """The single live focus-lock session.

    ``opening`` is the hole left in the coverage; ``pin_rect`` is where the
    target's front window is held. They are equal unless the opening was
    refined from a measured window rect.
    """

    session_id: str = Field(description="Unique identifier for this session")
    target_app: str = Field(description="Name of the application being focused")
    duration: SessionDuration
    started_at: datetime = Field(default_factory=datetime.now)
    opening: Rect
    pin_rect: Rect


class StartResult(BaseModel):
    """Outcome of a start request."""

    ok: bool
    error: StartError | None = None
    detail: str | None = None

    @classmethod
    def success(cls) -> StartResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: StartError, detail: str | None = None) -> StartResult:
        return cls(ok=False, error=error, detail=detail)


class EndResult(BaseModel):
    """Outcome of an end request. Ending is idempotent, so ``ok`` is always set."""

    ok: bool = True
    reason: EndReason | None = Field(
        default=None, description="Reason recorded, None when no session was live"
    )


class SessionStatus(BaseModel):
    """Read-only snapshot of the engine for status queries."""

    state: SessionState
    target_app: str | None = None
    mode: DurationMode | None = None
    minutes: float | None = None
    started_at: datetime | None = None
    opening: Rect | None = None
    coverage_size: int = 0
