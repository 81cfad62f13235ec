"""The session state machine that orchestrates a focus lock.

Ties together the display service, window pinning, coverage, the
preference guard and the invariant watchdog. Commands are serialized on
one worker task so a start never interleaves with another start or an
end; the enforcement tick, the watchdog and the session timer only ever
*request* an end, they never tear down state themselves.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable

from blinders.config.settings import GeometryConfig, Settings
from blinders.coverage.base import CoverageError, RegionFactory
from blinders.coverage.manager import EXPECTED_REGIONS, CoverageManager
from blinders.display.base import DisplayError, DisplayService
from blinders.domain.models import (
    DurationMode,
    EndReason,
    EndResult,
    Session,
    SessionDuration,
    SessionState,
    SessionStatus,
    StartError,
    StartResult,
)
from blinders.engine.guard import PreferenceGuard
from blinders.engine.pinning import PinningSupervisor
from blinders.engine.watchdog import InvariantWatchdog
from blinders.geometry import compute_opening, pad_measured
from blinders.preferences.base import PreferenceStore
from blinders.windows.base import WindowControl, WindowControlError

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60.0

_Command = tuple[Callable[[], Awaitable[Any]], "asyncio.Future[Any]"]


class SessionEngine:
    """Owns the one live Session and everything scheduled on its behalf.

    States: IDLE -> STARTING -> RUNNING -> ENDING -> IDLE.
    """

    def __init__(
        self,
        display: DisplayService,
        control: WindowControl,
        coverage: CoverageManager,
        guard: PreferenceGuard | None = None,
        geometry: GeometryConfig | None = None,
        pin_interval: float = 0.6,
        max_pin_failures: int = 5,
        measure_bounds: bool = False,
        measure_padding: int = 4,
        watchdog_interval: float = 1.0,
        default_minutes: float = 15.0,
        min_minutes: float = 1.0,
        on_session_end: Callable[[EndReason], None] | None = None,
        on_quit: Callable[[], None] | None = None,
    ) -> None:
        self._display = display
        self._control = control
        self._coverage = coverage
        self._guard = guard
        self._geometry = geometry or GeometryConfig()
        self._measure_bounds = measure_bounds
        self._measure_padding = measure_padding
        self._default_minutes = default_minutes
        self._min_minutes = min_minutes
        self._on_session_end = on_session_end
        self._on_quit = on_quit

        self._pinning = PinningSupervisor(
            control,
            interval=pin_interval,
            max_consecutive_failures=max_pin_failures,
            remeasure=measure_bounds,
        )
        self._watchdog = InvariantWatchdog(
            lambda: self._coverage.size,
            expected=EXPECTED_REGIONS,
            interval=watchdog_interval,
        )

        self._state = SessionState.IDLE
        self._session: Session | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._last_end_reason: EndReason | None = None

        self._commands: asyncio.Queue[_Command] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._current: tuple[asyncio.Task[Any], asyncio.Future[Any]] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        display: DisplayService,
        control: WindowControl,
        factory: RegionFactory,
        store: PreferenceStore | None = None,
        on_session_end: Callable[[EndReason], None] | None = None,
        on_quit: Callable[[], None] | None = None,
    ) -> SessionEngine:
        """Build an engine with every tunable taken from ``settings``."""
        guard = None
        if store is not None and settings.preference.enabled:
            guard = PreferenceGuard(
                store,
                key=settings.preference.key,
                session_value=settings.preference.session_value,
                settle_delay=settings.preference.settle_delay,
            )
        return cls(
            display=display,
            control=control,
            coverage=CoverageManager(factory, settings.coverage),
            guard=guard,
            geometry=settings.geometry,
            pin_interval=settings.pinning.interval,
            max_pin_failures=settings.pinning.max_consecutive_failures,
            measure_bounds=settings.pinning.measure_bounds,
            measure_padding=settings.pinning.measure_padding,
            watchdog_interval=settings.watchdog.interval,
            default_minutes=settings.session.default_minutes,
            min_minutes=settings.session.min_minutes,
            on_session_end=on_session_end,
            on_quit=on_quit,
        )

    # -- Introspection -------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def coverage(self) -> CoverageManager:
        return self._coverage

    @property
    def pinning(self) -> PinningSupervisor:
        return self._pinning

    @property
    def watchdog(self) -> InvariantWatchdog:
        return self._watchdog

    def status(self) -> SessionStatus:
        s = self._session
        try:
            coverage_size = self._coverage.size
        except Exception:
            coverage_size = 0
        return SessionStatus(
            state=self._state,
            target_app=s.target_app if s else None,
            mode=s.duration.mode if s else None,
            minutes=s.duration.minutes if s else None,
            started_at=s.started_at if s else None,
            opening=s.opening if s else None,
            coverage_size=coverage_size,
        )

    def take_last_end_reason(self) -> EndReason | None:
        """Return the reason the last session ended, once."""
        reason, self._last_end_reason = self._last_end_reason, None
        return reason

    # -- Public commands -----------------------------------------------------

    async def list_apps(self) -> list[str]:
        return await self._control.list_foreground_apps()

    async def start_session(self, app: str, duration: Any = None) -> StartResult:
        """Start a focus session on ``app``.

        Args:
            app: Application name as reported by ``list_apps``.
            duration: Minutes, or None / ``"done"`` for an open-ended session.
        """
        return await self._submit(lambda: self._start(app, duration))

    async def end_session(self, reason: EndReason = EndReason.MANUAL) -> EndResult:
        """End the live session. Succeeds when there is nothing to end."""
        return await self._submit(lambda: self._end(reason))

    def request_end(self, reason: EndReason, session_id: str | None = None) -> None:
        """Queue an end without waiting for it.

        Used by ticks, timers and hotkeys. When ``session_id`` is given the
        request is dropped if that session is no longer the live one.
        """
        loop = asyncio.get_running_loop()
        self._ensure_worker()
        future: asyncio.Future[Any] = loop.create_future()
        self._commands.put_nowait((lambda: self._end(reason, session_id), future))

    async def emergency_quit(self) -> None:
        """Tear everything down from any state, then invoke the quit hook."""
        logger.warning("Emergency quit")
        await self.teardown()
        if self._on_quit is not None:
            try:
                self._on_quit()
            except Exception as e:
                logger.error("Quit hook failed: %s", e)

    async def teardown(self) -> None:
        """Best-effort full teardown. Each step runs even if an earlier one fails."""
        try:
            self._cancel_commands()
        except Exception as e:
            logger.error("Could not cancel pending commands: %s", e)
        try:
            self._stop_tasks()
        except Exception as e:
            logger.error("Could not stop session tasks: %s", e)

        self._session = None
        self._state = SessionState.IDLE

        try:
            self._coverage.destroy()
        except Exception as e:
            logger.error("Could not destroy coverage: %s", e)
        if self._guard is not None:
            try:
                await self._guard.restore()
            except Exception as e:
                logger.error("Could not restore preference: %s", e)

    async def close(self) -> None:
        """Shut the engine down, tearing down any live session."""
        await self.teardown()

    async def __aenter__(self) -> SessionEngine:
        self._ensure_worker()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()

    # -- Command queue -------------------------------------------------------

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._commands = asyncio.Queue()
            self._worker = asyncio.create_task(self._process_commands())

    async def _submit(self, factory: Callable[[], Awaitable[Any]]) -> Any:
        loop = asyncio.get_running_loop()
        self._ensure_worker()
        future: asyncio.Future[Any] = loop.create_future()
        self._commands.put_nowait((factory, future))
        return await future

    async def _process_commands(self) -> None:
        while True:
            factory, future = await self._commands.get()
            if future.done():
                continue
            task = asyncio.create_task(factory())
            self._current = (task, future)
            try:
                await asyncio.wait([task])
            finally:
                if self._current is not None and self._current[0] is task:
                    self._current = None

            if future.done():
                continue
            if task.cancelled():
                future.cancel()
            elif task.exception() is not None:
                future.set_exception(task.exception())
            else:
                future.set_result(task.result())

    def _cancel_commands(self) -> None:
        if self._current is not None:
            task, future = self._current
            task.cancel()
            future.cancel()
            self._current = None
        if self._worker is not None:
            self._worker.cancel()
            self._worker = None
        if self._commands is not None:
            while not self._commands.empty():
                _, future = self._commands.get_nowait()
                future.cancel()
            self._commands = None

    # -- Start ---------------------------------------------------------------

    async def _start(self, app: str, duration_value: Any) -> StartResult:
        if self._state is not SessionState.IDLE:
            current = self._session.target_app if self._session else "?"
            logger.warning("Start of %r rejected: session for %r is %s", app, current, self._state.value)
            return StartResult.failure(StartError.SESSION_ACTIVE, f"session for {current} is active")

        duration = SessionDuration.normalize(
            duration_value,
            default_minutes=self._default_minutes,
            min_minutes=self._min_minutes,
        )
        logger.info(
            "Session start: app=%r duration=%r mode=%s", app, duration_value, duration.mode.value
        )

        self._state = SessionState.STARTING
        try:
            result = await self._bring_up(app, duration)
        except Exception:
            logger.exception("Session start crashed, rolling back")
            await self._rollback()
            raise
        if not result.ok:
            logger.warning("Session start aborted: %s (%s)", result.error.value, result.detail)
            await self._rollback()
        return result

    async def _bring_up(self, app: str, duration: SessionDuration) -> StartResult:
        session_id = uuid.uuid4().hex[:12]

        try:
            await self._pinning.activate(app)
            if not await self._pinning.has_window(app):
                return StartResult.failure(StartError.NO_WINDOWS, f"{app} has no open windows")

            full = await self._display.primary_bounds()
            work = await self._display.primary_work_area()
            opening = compute_opening(work, full, self._geometry)
            pin_rect = opening

            # Pin before any coverage exists; topmost regions interfere with raise/focus.
            await self._pinning.pin(app, pin_rect)
        except (WindowControlError, DisplayError) as e:
            return StartResult.failure(StartError.CONTROL_FAILED, str(e))

        if self._measure_bounds:
            measured = await self._pinning.measure_bounds(app)
            if measured is not None and measured.clamped_to(full).area > 0:
                pin_rect = measured.clamped_to(full)
                opening = pad_measured(measured, self._measure_padding, full)
                logger.info("Opening refined from measured window: %s", opening)
            elif measured is not None:
                logger.warning("Measured window %s lies off the display; keeping %s", measured, opening)

        self._session = Session(
            session_id=session_id,
            target_app=app,
            duration=duration,
            opening=opening,
            pin_rect=pin_rect,
        )

        if self._guard is not None:
            await self._guard.engage()

        try:
            self._coverage.create(full, opening)
        except CoverageError as e:
            return StartResult.failure(StartError.MASK_FAILED, str(e))

        # Coverage now sits above everything; bring the target back on top of it.
        try:
            await self._pinning.activate(app)
            await self._pinning.pin(app, pin_rect)
        except WindowControlError as e:
            logger.warning("Re-activate/re-pin after coverage failed: %s", e)

        try:
            size = self._coverage.size
        except Exception as e:
            return StartResult.failure(StartError.MASK_MISSING, f"coverage unreadable: {e}")
        if size != EXPECTED_REGIONS:
            return StartResult.failure(StartError.MASK_MISSING, f"count={size}")

        def escalate(reason: EndReason) -> None:
            self.request_end(reason, session_id)

        self._pinning.start(app, pin_rect, opening, on_escalate=escalate)
        self._watchdog.start(escalate)
        if duration.mode is DurationMode.TIMED:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(
                duration.minutes * SECONDS_PER_MINUTE,
                self.request_end,
                EndReason.TIMER,
                session_id,
            )

        self._state = SessionState.RUNNING
        logger.info("Session %s running: app=%r opening=%s", session_id, app, opening)
        return StartResult.success()

    async def _rollback(self) -> None:
        self._stop_tasks()
        self._session = None
        self._coverage.destroy()
        if self._guard is not None:
            await self._guard.restore()
        self._state = SessionState.IDLE

    # -- End -----------------------------------------------------------------

    async def _end(self, reason: EndReason, session_id: str | None = None) -> EndResult:
        session = self._session
        if self._state is SessionState.IDLE or session is None:
            return EndResult(ok=True)
        if session_id is not None and session_id != session.session_id:
            logger.debug("Dropping stale %s request for session %s", reason.value, session_id)
            return EndResult(ok=True)

        logger.info("Session end: reason=%s app=%r", reason.value, session.target_app)
        self._state = SessionState.ENDING

        # Cancel everything scheduled before coverage goes away.
        self._stop_tasks()
        self._session = None
        self._coverage.destroy()

        if self._guard is not None:
            restored = await self._guard.restore()
            if not restored:
                logger.warning("Preference was not restored")

        self._last_end_reason = reason
        self._state = SessionState.IDLE

        if self._on_session_end is not None:
            try:
                self._on_session_end(reason)
            except Exception as e:
                logger.error("Session end listener failed: %s", e)
        return EndResult(ok=True, reason=reason)

    def _stop_tasks(self) -> None:
        self._pinning.stop()
        self._watchdog.stop()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
