"""Invariant watchdog for the coverage set."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from blinders.domain.models import EndReason

logger = logging.getLogger(__name__)


class InvariantWatchdog:
    """Periodically checks that exactly ``expected`` coverage regions are alive.

    Structural rather than liveness check: it catches regions destroyed
    behind the engine's back (window manager activity, a crashed surface)
    even while some other task is stuck on an external call.
    """

    def __init__(
        self,
        count: Callable[[], int],
        expected: int,
        interval: float = 1.0,
    ) -> None:
        self._count = count
        self._expected = expected
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, on_violation: Callable[[EndReason], None]) -> None:
        self.stop()
        self._task = asyncio.create_task(self._run(on_violation))

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def check(self) -> EndReason | None:
        """Evaluate the invariant once."""
        try:
            count = self._count()
        except Exception as e:
            logger.error("Coverage invariant check failed: %s", e)
            return EndReason.WATCHDOG_ERROR
        if count != self._expected:
            logger.error("Coverage invariant failed (count=%d, expected %d)", count, self._expected)
            return EndReason.WATCHDOG
        return None

    async def _run(self, on_violation: Callable[[EndReason], None]) -> None:
        while True:
            await asyncio.sleep(self._interval)
            reason = self.check()
            if reason is not None:
                on_violation(reason)
                return
