"""Global hotkeys.

Coverage regions never take focus, so the only way to reach the engine
during a session is a system-wide hotkey. pynput listens on its own
thread; every hotkey is handed to the asyncio loop and runs there.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from pynput import keyboard

logger = logging.getLogger(__name__)


class HotkeyListener:
    """Maps pynput hotkey strings (``"<cmd>+<shift>+x"``) to loop callbacks."""

    def __init__(
        self,
        bindings: dict[str, Callable[[], None]],
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._bindings = dict(bindings)
        self._loop = loop
        self._listener: keyboard.GlobalHotKeys | None = None

    @property
    def is_running(self) -> bool:
        return self._listener is not None

    def start(self) -> None:
        if self._listener is not None:
            return
        hotkeys = {combo: self._dispatcher(combo, cb) for combo, cb in self._bindings.items()}
        self._listener = keyboard.GlobalHotKeys(hotkeys)
        self._listener.daemon = True
        self._listener.start()
        logger.info("Hotkeys registered: %s", ", ".join(self._bindings))

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None

    def _dispatcher(self, combo: str, callback: Callable[[], None]) -> Callable[[], None]:
        def fire() -> None:
            logger.info("Hotkey %s", combo)
            try:
                self._loop.call_soon_threadsafe(callback)
            except RuntimeError as e:
                # Loop already closed during shutdown.
                logger.debug("Dropped hotkey %s: %s", combo, e)

        return fire
