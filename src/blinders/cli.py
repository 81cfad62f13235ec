"""Command-line interface for blinders.

``serve`` runs the focus lock engine with every host backend attached.
The other commands are thin clients of a running server's control API.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="blinders",
        description="Focus lock: pin one app and cover the rest of the screen",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/blinders.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Run the engine, control API and hotkeys")
    subparsers.add_parser("apps", help="List applications that can be focused")

    start_parser = subparsers.add_parser("start", help="Start a focus session")
    start_parser.add_argument("app", type=str, help="Application to focus")
    duration = start_parser.add_mutually_exclusive_group()
    duration.add_argument(
        "--minutes", type=float, default=None,
        help="Session length in minutes (default: configured default)",
    )
    duration.add_argument(
        "--until-done", action="store_true",
        help="Run until ended manually",
    )

    end_parser = subparsers.add_parser("end", help="End the running session")
    end_parser.add_argument(
        "--reason", type=str, default="manual",
        help="End reason to record (default: manual)",
    )

    subparsers.add_parser("status", help="Show the current session")
    subparsers.add_parser("last-reason", help="Show why the last session ended (consumes it)")
    subparsers.add_parser("opening", help="Print the opening computed for the primary display")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from blinders.config.settings import load_settings
    from blinders.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting blinders on %s:%d", settings.api.host, settings.api.port)
        from blinders.runtime import serve
        serve(settings)

    elif args.command == "opening":
        asyncio.run(_print_opening(settings))

    else:
        from blinders.client import ControlClientError
        try:
            code = asyncio.run(_run_client(settings, args))
        except ControlClientError as e:
            print(f"Error: {e}", file=sys.stderr)
            code = 1
        if code:
            sys.exit(code)


async def _run_client(settings, args) -> int:
    """Send one command to the running server and print the answer."""
    from blinders.client import ControlClient
    from blinders.domain.models import EndReason

    base_url = f"http://{settings.api.host}:{settings.api.port}"
    async with ControlClient(base_url, timeout=settings.api.timeout) as client:
        if args.command == "apps":
            for name in await client.list_apps():
                print(name)

        elif args.command == "start":
            if args.until_done:
                duration = "done"
            elif args.minutes is not None:
                duration = args.minutes
            else:
                duration = settings.session.default_minutes
            result = await client.start_session(args.app, duration)
            if not result.ok:
                print(f"Start failed: {result.error.value} ({result.detail})", file=sys.stderr)
                return 1
            print(f"Focusing {args.app}")

        elif args.command == "end":
            try:
                reason = EndReason(args.reason)
            except ValueError:
                choices = ", ".join(r.value for r in EndReason)
                print(f"Unknown reason {args.reason!r} (choose from {choices})", file=sys.stderr)
                return 2
            result = await client.end_session(reason)
            print(f"Ended: {result.reason.value}" if result.reason else "No session running")

        elif args.command == "status":
            status = await client.status()
            print(f"State:    {status.state.value}")
            if status.target_app:
                length = f"{status.minutes:g} min" if status.minutes else "until done"
                print(f"App:      {status.target_app}")
                print(f"Duration: {length}")
                print(f"Started:  {status.started_at:%H:%M:%S}")
                o = status.opening
                print(f"Opening:  {o.width}x{o.height} at ({o.x}, {o.y})")
                print(f"Coverage: {status.coverage_size} regions")

        elif args.command == "last-reason":
            reason = await client.last_end_reason()
            print(reason.value if reason else "none")

    return 0


async def _print_opening(settings) -> None:
    """Compute the opening from the live display without starting a session."""
    from blinders.coverage.layout import plan_regions
    from blinders.display.screen import ScreenInfoDisplay
    from blinders.geometry import compute_opening

    display = ScreenInfoDisplay(settings.display)
    full = await display.primary_bounds()
    work = await display.primary_work_area()
    opening = compute_opening(work, full, settings.geometry)

    print(f"Display:   {full.width}x{full.height} at ({full.x}, {full.y})")
    print(f"Work area: {work.width}x{work.height} at ({work.x}, {work.y})")
    print(f"Opening:   {opening.width}x{opening.height} at ({opening.x}, {opening.y})")
    regions = plan_regions(
        full, opening,
        cap_height=settings.coverage.cap_height,
        overlap=settings.coverage.overlap,
    )
    for role, rect in regions.items():
        print(f"  {role.value:<7} {rect.width}x{rect.height} at ({rect.x}, {rect.y})")


if __name__ == "__main__":
    main()
