"""Window pinning supervisor.

Places the target application's front window into the opening and keeps
it there with a periodic enforcement tick. The tick never tears a
session down itself: it reports an EndReason through a callback and
stops.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from pydantic import ValidationError

from blinders.domain.models import EndReason, Rect
from blinders.windows.base import WindowControl, WindowControlError

logger = logging.getLogger(__name__)


class PinningSupervisor:
    """Drives a WindowControl backend to hold one window in place."""

    def __init__(
        self,
        control: WindowControl,
        interval: float = 0.6,
        max_consecutive_failures: int = 5,
        remeasure: bool = False,
    ) -> None:
        self._control = control
        self._interval = interval
        self._max_failures = max_consecutive_failures
        self._remeasure = remeasure
        self._failures = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    @property
    def is_enforcing(self) -> bool:
        return self._task is not None and not self._task.done()

    async def activate(self, app: str) -> None:
        await self._control.activate(app)

    async def has_window(self, app: str) -> bool:
        return await self._control.has_window(app)

    async def pin(self, app: str, rect: Rect) -> None:
        logger.debug("Pin %s -> %s", app, rect)
        await self._control.set_bounds(app, rect)

    async def measure_bounds(self, app: str) -> Rect | None:
        """The window's actual frame after pinning, or None if unavailable.

        A frame that cannot be read or has no area counts as unavailable.
        """
        try:
            frame = await self._control.get_bounds(app)
        except (WindowControlError, ValidationError) as e:
            logger.warning("Could not measure %s: %s", app, e)
            return None
        if frame is not None and frame.area == 0:
            logger.warning("Ignoring empty frame for %s: %s", app, frame)
            return None
        return frame

    def start(
        self,
        app: str,
        pin_rect: Rect,
        opening: Rect,
        on_escalate: Callable[[EndReason], None],
    ) -> None:
        """Start the enforcement tick. Any previous tick is cancelled first."""
        self.stop()
        self._failures = 0
        self._task = asyncio.create_task(self._run(app, pin_rect, opening, on_escalate))

    def stop(self) -> None:
        """Cancel the enforcement tick without waiting for it."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._failures = 0

    async def tick(self, app: str, pin_rect: Rect, opening: Rect) -> EndReason | None:
        """Run one enforcement pass.

        Returns:
            APP_CLOSED when the target has no windows left (checked before
            any re-pin), PIN_FAILED once failures reach the limit, else None.
        """
        try:
            if not await self._control.has_window(app):
                logger.info("%s has no windows left", app)
                return EndReason.APP_CLOSED

            await self.pin(app, pin_rect)
            if self._remeasure:
                actual = await self._control.get_bounds(app)
                if actual is not None and not opening.contains(actual):
                    logger.warning("%s window escaped the opening: %s", app, actual)
            self._failures = 0
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._failures += 1
            logger.warning("Pin error %d/%d: %s", self._failures, self._max_failures, e)
            if self._failures >= self._max_failures:
                logger.error("Pinning failed %d times in a row", self._failures)
                return EndReason.PIN_FAILED
        return None

    async def _run(
        self,
        app: str,
        pin_rect: Rect,
        opening: Rect,
        on_escalate: Callable[[EndReason], None],
    ) -> None:
        while True:
            await asyncio.sleep(self._interval)
            reason = await self.tick(app, pin_rect, opening)
            if reason is not None:
                on_escalate(reason)
                return
