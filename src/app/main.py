#!/usr/bin/env python3
"""Terminal clock that shows a web server's estimated time.

Usage:
  python -m src.app.main naver.com
  python -m src.app.main naver.com --duration 10
  python -m src.app.main naver.com --api http://localhost:8000
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, TextIO

from src.api.client import RemoteSyncClient
from src.app.preferences import PreferenceStore
from src.app.session import DisplayState, SyncSession, SyncSource
from src.config.settings import settings
from src.time.formatting import format_offset
from src.time.sync import OffsetEstimator
from src.utils.logging_config import setup_logging


class Colors:
    """ANSI color codes"""
    RED = '\033[91m'
    GRAY = '\033[90m'
    WHITE = '\033[97m'
    BLACK = '\033[30m'
    BOLD = '\033[1m'
    END = '\033[0m'


class ClockRenderer:
    """Redraws the clock line in place on every state change."""

    def __init__(self, out: TextIO = sys.stdout):
        self.out = out
        self._header_shown_for: Optional[str] = None

    def __call__(self, state: DisplayState) -> None:
        if state.last_error:
            self.out.write(f"\r{Colors.RED}{state.last_error}{Colors.END}\n")
            self.out.flush()
            return
        if state.displayed_time is None or state.active_offset is None:
            return

        if self._header_shown_for != state.source_address:
            self._header_shown_for = state.source_address
            self.out.write(f"{Colors.GRAY}{state.source_address}{Colors.END}\n")
            self.out.write("Server Time:\n")

        text = Colors.WHITE if state.dark_mode else Colors.BLACK
        offset = format_offset(state.active_offset.offset_ms)
        self.out.write(
            f"\r{Colors.BOLD}{text}{state.displayed_time}{Colors.END}"
            f"  {Colors.GRAY}Offset: {offset}{Colors.END}"
        )
        self.out.flush()


def build_source(api_url: Optional[str] = None) -> SyncSource:
    if api_url:
        return RemoteSyncClient(api_url)
    return OffsetEstimator(timeout=settings.PROBE_TIMEOUT_SECONDS)


async def run_clock(
    address: str,
    source: SyncSource,
    duration: float = 0.0,
    toggle_theme: bool = False,
    out: TextIO = sys.stdout,
    preferences: Optional[PreferenceStore] = None,
) -> int:
    """Sync once, then tick until ``duration`` elapses (forever if 0)."""
    session = SyncSession(
        source,
        preferences=preferences or PreferenceStore(settings.PREFERENCES_PATH),
        interval_ms=settings.TICK_INTERVAL_MS,
    )
    session.open()
    if toggle_theme:
        session.toggle_dark_mode()
    session.subscribe(ClockRenderer(out))

    try:
        state = await session.sync(address)
        if state.active_offset is None:
            return 1
        if duration > 0:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()
    finally:
        await session.close()
        out.write("\n")
        out.flush()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Show a web server's time, live")
    parser.add_argument("address", help="Site address, e.g. naver.com or https://example.com")
    parser.add_argument(
        "--api",
        default=None,
        help="Base URL of a running time sync API (default: probe in-process)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Seconds to keep ticking (default: until Ctrl+C)",
    )
    parser.add_argument(
        "--toggle-theme",
        action="store_true",
        help="Flip and remember the dark/light preference",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, component="clock", log_path=settings.LOG_PATH, json_logs=False)

    try:
        return asyncio.run(
            run_clock(args.address, build_source(args.api), args.duration, args.toggle_theme)
        )
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
