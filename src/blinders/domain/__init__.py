"""Domain models for blinders.

This package contains the core data structures, enumerations, and value
objects shared by the engine, the host backends and the control API. All
models use Pydantic v2 for validation and serialization.
"""

from blinders.domain.models import (
    DurationMode,
    EndReason,
    EndResult,
    Rect,
    RegionRole,
    Session,
    SessionDuration,
    SessionState,
    SessionStatus,
    StartError,
    StartResult,
)

__all__ = [
    "DurationMode",
    "EndReason",
    "EndResult",
    "Rect",
    "RegionRole",
    "Session",
    "SessionDuration",
    "SessionState",
    "SessionStatus",
    "StartError",
    "StartResult",
]
