"""Focus lock engine for blinders.

Contains the session state machine and the components it sequences:
window pinning, the preference guard and the coverage invariant
watchdog.

Public API:
    SessionEngine -- Session state machine (root)
    PinningSupervisor -- Holds the target window in the opening
    PreferenceGuard -- Snapshot/restore of one system preference
    InvariantWatchdog -- Periodic coverage invariant check
"""

from blinders.engine.guard import PreferenceGuard
from blinders.engine.pinning import PinningSupervisor
from blinders.engine.session import SessionEngine
from blinders.engine.watchdog import InvariantWatchdog

__all__ = ["InvariantWatchdog", "PinningSupervisor", "PreferenceGuard", "SessionEngine"]
