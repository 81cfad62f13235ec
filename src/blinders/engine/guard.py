"""Preference guard: bracket a session with one system-wide UI toggle."""

from __future__ import annotations

import asyncio
import logging

from blinders.preferences.base import PreferenceStore

logger = logging.getLogger(__name__)


class PreferenceGuard:
    """Snapshots a boolean preference, overrides it, and restores it once.

    ``engage()`` records the current value and writes the session value;
    ``restore()`` writes the snapshot back and clears it. An unknown
    snapshot leaves the preference untouched, so restoring it is a
    logged no-op. Neither method raises.
    """

    def __init__(
        self,
        store: PreferenceStore,
        key: str,
        session_value: bool = True,
        settle_delay: float = 0.6,
    ) -> None:
        self._store = store
        self._key = key
        self._session_value = session_value
        self._settle_delay = settle_delay
        self._snapshot: bool | None = None

    @property
    def snapshot(self) -> bool | None:
        return self._snapshot

    async def engage(self) -> None:
        if self._snapshot is not None:
            # An earlier restore failed; its snapshot is the real pre-session value.
            logger.warning(
                "Keeping pending snapshot %s=%s from a failed restore", self._key, self._snapshot
            )
        else:
            try:
                self._snapshot = await self._store.read(self._key)
            except Exception as e:
                logger.warning("Could not read %s: %s", self._key, e)
                self._snapshot = None

        if self._snapshot is None:
            logger.warning("%s is unknown; leaving it unchanged for this session", self._key)
            return

        try:
            await self._store.write(self._key, self._session_value)
        except Exception as e:
            logger.warning("Could not set %s=%s: %s", self._key, self._session_value, e)
            return

        await asyncio.sleep(self._settle_delay)
        logger.info("%s prev=%s set=%s", self._key, self._snapshot, self._session_value)

    async def restore(self) -> bool:
        """Write the snapshot back. Returns True only when a value was restored."""
        if self._snapshot is None:
            logger.info("%s: nothing to restore", self._key)
            return False

        value = self._snapshot
        try:
            await self._store.write(self._key, value)
        except Exception as e:
            logger.error("Could not restore %s=%s: %s", self._key, value, e)
            return False

        self._snapshot = None
        logger.info("%s restored to %s", self._key, value)
        return True
