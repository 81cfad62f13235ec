"""Shared test fixtures for the blinders test suite.

Provides in-memory doubles for every host service the engine talks to
(display, window control, preferences, coverage surfaces) and an engine
wired to them with short intervals.
"""

from __future__ import annotations

import pytest

from blinders.config.settings import CoverageConfig
from blinders.coverage.base import CoverageError, CoverageRegion, RegionFactory
from blinders.coverage.manager import CoverageManager
from blinders.display.base import DisplayService
from blinders.domain.models import Rect, RegionRole
from blinders.engine.guard import PreferenceGuard
from blinders.engine.session import SessionEngine
from blinders.preferences.base import PreferenceError, PreferenceStore
from blinders.windows.base import WindowControl, WindowControlError

MENU_BAR_KEY = "_HIHideMenuBar"


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


class FakeDisplay(DisplayService):
    """A 1920x1080 primary display with a 25px menu bar."""

    def __init__(
        self,
        bounds: Rect | None = None,
        work_area: Rect | None = None,
    ) -> None:
        self.bounds = bounds or Rect(x=0, y=0, width=1920, height=1080)
        self.work_area = work_area or Rect(x=0, y=25, width=1920, height=1055)

    async def primary_bounds(self) -> Rect:
        return self.bounds

    async def primary_work_area(self) -> Rect:
        return self.work_area


@pytest.fixture
def display() -> FakeDisplay:
    return FakeDisplay()


# ---------------------------------------------------------------------------
# Window Control
# ---------------------------------------------------------------------------


class FakeWindowControl(WindowControl):
    """Records every call; each app's window count and failures are settable."""

    def __init__(self, apps: dict[str, int] | None = None) -> None:
        self.apps = dict(apps) if apps is not None else {"Notes": 1, "Safari": 2}
        self.calls: list[tuple] = []
        self.bounds: dict[str, Rect] = {}
        self.fail_set_bounds = False
        self.fail_activate = False
        self.measured: Rect | None = None

    async def list_foreground_apps(self) -> list[str]:
        self.calls.append(("list",))
        return list(self.apps)

    async def activate(self, app: str) -> None:
        self.calls.append(("activate", app))
        if self.fail_activate:
            raise WindowControlError(f"cannot activate {app}", backend="fake")

    async def has_window(self, app: str) -> bool:
        self.calls.append(("has_window", app))
        return self.apps.get(app, 0) > 0

    async def set_bounds(self, app: str, rect: Rect) -> None:
        self.calls.append(("set_bounds", app, rect))
        if self.fail_set_bounds:
            raise WindowControlError(f"cannot pin {app}", backend="fake")
        self.bounds[app] = rect

    async def get_bounds(self, app: str) -> Rect | None:
        self.calls.append(("get_bounds", app))
        if self.measured is not None:
            return self.measured
        return self.bounds.get(app)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def control() -> FakeWindowControl:
    return FakeWindowControl()


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


class FakePreferenceStore(PreferenceStore):
    """Dictionary-backed preferences. A missing key reads as unknown."""

    def __init__(self, values: dict[str, bool] | None = None) -> None:
        self.values = dict(values) if values is not None else {MENU_BAR_KEY: False}
        self.writes: list[tuple[str, bool]] = []
        self.fail_writes = False
        self.fail_reads = False

    async def read(self, key: str) -> bool | None:
        if self.fail_reads:
            raise PreferenceError("read failed")
        return self.values.get(key)

    async def write(self, key: str, value: bool) -> None:
        if self.fail_writes:
            raise PreferenceError("write failed")
        self.writes.append((key, value))
        self.values[key] = value


@pytest.fixture
def store() -> FakePreferenceStore:
    return FakePreferenceStore()


@pytest.fixture
def guard(store: FakePreferenceStore) -> PreferenceGuard:
    return PreferenceGuard(store, key=MENU_BAR_KEY, settle_delay=0)


# ---------------------------------------------------------------------------
# Coverage Surfaces
# ---------------------------------------------------------------------------


class FakeRegion(CoverageRegion):
    """In-memory coverage region; ``kill()`` simulates an out-of-band close."""

    def __init__(self, role: RegionRole, bounds: Rect, hint: str | None = None) -> None:
        super().__init__(role, bounds)
        self.hint = hint
        self.alive = True
        self.shown = False
        self.topmost_calls = 0
        self.destroy_calls = 0
        self.broken = False

    @property
    def is_alive(self) -> bool:
        if self.broken:
            raise RuntimeError("surface state unavailable")
        return self.alive

    def show(self) -> None:
        self.shown = True

    def assert_topmost(self) -> None:
        self.topmost_calls += 1

    def destroy(self) -> None:
        self.destroy_calls += 1
        self.alive = False

    def kill(self) -> None:
        self.alive = False


class FakeRegionFactory(RegionFactory):
    """Creates FakeRegions; can be told to fail on a given role."""

    def __init__(self) -> None:
        self.created: list[FakeRegion] = []
        self.fail_on: RegionRole | None = None
        self.skip_show: RegionRole | None = None

    def create_region(
        self,
        role: RegionRole,
        bounds: Rect,
        hint: str | None = None,
    ) -> FakeRegion:
        if role is self.fail_on:
            raise CoverageError(f"cannot create {role.value}")
        region = FakeRegion(role, bounds, hint)
        if role is self.skip_show:
            region.alive = False
        self.created.append(region)
        return region


@pytest.fixture
def factory() -> FakeRegionFactory:
    return FakeRegionFactory()


@pytest.fixture
def coverage(factory: FakeRegionFactory) -> CoverageManager:
    return CoverageManager(factory, CoverageConfig(reassert_delays=[0.0]))


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


@pytest.fixture
def engine(
    display: FakeDisplay,
    control: FakeWindowControl,
    coverage: CoverageManager,
    guard: PreferenceGuard,
) -> SessionEngine:
    """An engine on fakes with fast pin and watchdog ticks."""
    return SessionEngine(
        display=display,
        control=control,
        coverage=coverage,
        guard=guard,
        pin_interval=0.01,
        max_pin_failures=5,
        watchdog_interval=0.01,
    )
