"""The ``serve`` runtime: one asyncio loop hosting the whole engine.

Wires the host backends, the Tk pump, the control API, global hotkeys
and the crash handlers together. Whatever way the loop stops (quit
hotkey, signal, server exit, an exception escaping anywhere), the
session is torn down and the preference restored before returning.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Coroutine

import uvicorn

from blinders.api.server import create_app
from blinders.config.settings import Settings
from blinders.domain.models import EndReason
from blinders.engine.session import SessionEngine

logger = logging.getLogger(__name__)


class Runtime:
    """Runs the engine with the real host backends until quit."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._quit = asyncio.Event()
        self._background: set[asyncio.Task[Any]] = set()
        self._engine: SessionEngine | None = None

    def request_quit(self) -> None:
        self._quit.set()

    async def run(self) -> None:
        from blinders.coverage.tk_backend import TkPump, TkRegionFactory, create_root
        from blinders.display.screen import ScreenInfoDisplay
        from blinders.hotkeys import HotkeyListener
        from blinders.preferences.macos_defaults import MacDefaultsPreferenceStore
        from blinders.windows.applescript import AppleScriptWindowControl

        s = self._settings
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(self._on_loop_exception)
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_quit)
            except NotImplementedError:
                logger.debug("Signal handlers unsupported on this platform")

        root = create_root()
        pump = TkPump(root)
        pump.start()

        engine = SessionEngine.from_settings(
            s,
            display=ScreenInfoDisplay(s.display),
            control=AppleScriptWindowControl(),
            factory=TkRegionFactory(root, color=s.coverage.color, hint_color=s.coverage.hint_color),
            store=MacDefaultsPreferenceStore(domain=s.preference.domain),
            on_session_end=self._on_session_end,
            on_quit=self.request_quit,
        )
        self._engine = engine

        hotkeys = None
        if s.hotkeys.enabled:
            hotkeys = HotkeyListener(
                {
                    s.hotkeys.end_session: lambda: engine.request_end(EndReason.MANUAL),
                    s.hotkeys.reopen_picker: self.open_picker,
                    s.hotkeys.emergency_quit: lambda: self._spawn(engine.emergency_quit()),
                },
                loop,
            )
            hotkeys.start()

        server = uvicorn.Server(
            uvicorn.Config(
                create_app(engine),
                host=s.api.host,
                port=s.api.port,
                log_config=None,
            )
        )
        server_task = asyncio.create_task(server.serve())
        quit_task = asyncio.create_task(self._quit.wait())

        try:
            await asyncio.wait([server_task, quit_task], return_when=asyncio.FIRST_COMPLETED)
        finally:
            logger.info("Shutting down")
            if hotkeys is not None:
                hotkeys.stop()
            await engine.teardown()
            server.should_exit = True
            quit_task.cancel()
            await asyncio.wait([server_task])
            pump.stop()
            try:
                root.destroy()
            except Exception as e:
                logger.debug("Tk root already gone: %s", e)
            self._engine = None

    def open_picker(self) -> None:
        """Launch the configured picker command, if any."""
        command = self._settings.picker.command
        if not command:
            logger.info("No picker command configured")
            return
        self._spawn(self._launch(command))

    async def _launch(self, command: list[str]) -> None:
        try:
            await asyncio.create_subprocess_exec(*command)
            logger.info("Launched picker: %s", " ".join(command))
        except OSError as e:
            logger.error("Could not launch picker %s: %s", command[0], e)

    def _on_session_end(self, reason: EndReason) -> None:
        self.open_picker()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        logger.critical("Unhandled error: %s", context.get("message"), exc_info=exc)
        if self._engine is not None:
            self._spawn(self._engine.emergency_quit())
        else:
            self.request_quit()


def serve(settings: Settings) -> None:
    """Run until quit. Teardown happens inside ``Runtime.run`` on every exit path."""
    try:
        asyncio.run(Runtime(settings).run())
    except KeyboardInterrupt:
        logger.info("Interrupted")
