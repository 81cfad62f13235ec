"""Coverage set lifecycle.

Owns the ordered set of five coverage regions framing the opening. The
set is either complete or empty: creation tears down any previous set
first and rolls back on partial failure, and destruction is immediate,
idempotent and never raises.
"""

from __future__ import annotations

import asyncio
import logging

from blinders.config.settings import CoverageConfig, HotkeyConfig, exit_hint_for
from blinders.coverage.base import CoverageError, CoverageRegion, RegionFactory
from blinders.coverage.layout import plan_regions
from blinders.domain.models import Rect, RegionRole

logger = logging.getLogger(__name__)

EXPECTED_REGIONS = len(RegionRole)


class CoverageManager:
    """Creates and destroys the CoverageSet.

    Usage::

        manager = CoverageManager(TkRegionFactory(root))
        manager.create(display_bounds, opening)
        assert manager.size == 5
        manager.destroy()
    """

    def __init__(
        self,
        factory: RegionFactory,
        config: CoverageConfig | None = None,
    ) -> None:
        self._factory = factory
        self._config = config or CoverageConfig()
        self._exit_hint = (
            self._config.exit_hint
            if self._config.exit_hint is not None
            else exit_hint_for(HotkeyConfig())
        )
        self._regions: list[CoverageRegion] = []
        self._pending: list[asyncio.TimerHandle] = []

    @property
    def regions(self) -> list[CoverageRegion]:
        return list(self._regions)

    @property
    def size(self) -> int:
        """Number of regions whose surface is still alive.

        Regions destroyed out-of-band drop out of the count, which is what
        the watchdog relies on. Propagates backend errors.
        """
        return sum(1 for region in self._regions if region.is_alive)

    def create(self, full: Rect, opening: Rect) -> None:
        """Materialize the five regions around ``opening``.

        Must be called from the event loop; delayed topmost re-assertion
        ticks are scheduled on it.

        Raises:
            CoverageError: If any region fails. No partial set survives.
        """
        self.destroy()

        loop = asyncio.get_running_loop()
        layout = plan_regions(
            full,
            opening,
            cap_height=self._config.cap_height,
            overlap=self._config.overlap,
        )

        try:
            for role, bounds in layout.items():
                hint = self._exit_hint if role is RegionRole.BOTTOM else None
                region = self._factory.create_region(role, bounds, hint=hint)
                self._regions.append(region)

                region.assert_topmost()
                region.show()
                region.assert_topmost()
                for delay in self._config.reassert_delays:
                    self._pending.append(loop.call_later(delay, self._reassert, region))
        except Exception as e:
            logger.error("Coverage creation failed after %d regions: %s", len(self._regions), e)
            self.destroy()
            if isinstance(e, CoverageError):
                raise
            raise CoverageError(f"Failed to create coverage regions: {e}") from e

        logger.info("Display bounds: %s", full)
        logger.info("Opening: %s", opening)
        logger.info("Coverage created: count=%d", len(self._regions))

    def destroy(self) -> None:
        """Release every region. Safe to call when already empty."""
        for handle in self._pending:
            handle.cancel()
        self._pending = []

        regions, self._regions = self._regions, []
        for region in regions:
            try:
                region.destroy()
            except Exception as e:
                logger.warning("Failed to destroy %r: %s", region, e)
        if regions:
            logger.info("Coverage destroyed: count=%d", len(regions))

    def _reassert(self, region: CoverageRegion) -> None:
        try:
            if region.is_alive:
                region.assert_topmost()
        except Exception as e:
            logger.debug("Topmost re-assertion failed for %r: %s", region, e)
