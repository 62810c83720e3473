"""
Sync session: the state behind one clock display.

The session owns the display state, the live projector and the theme
preference. It is opened once, synced any number of times and closed on
exit. The active offset only exists while the latest sync succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Protocol

import structlog

from src.app.preferences import PreferenceStore, load_dark_mode, save_dark_mode, system_prefers_dark
from src.time.errors import EstimationError, FETCH_FAILED
from src.time.formatting import format_instant
from src.time.projector import DEFAULT_TICK_INTERVAL_MS, LiveClockProjector, wall_clock_ms
from src.time.sync import TimeEstimate

logger = structlog.get_logger(__name__)


class SyncSource(Protocol):
    def estimate(self, raw_address: Optional[str]) -> Awaitable[TimeEstimate]: ...


@dataclass(frozen=True)
class TimeOffset:
    offset_ms: int


@dataclass
class DisplayState:
    is_syncing: bool = False
    last_error: Optional[str] = None
    active_offset: Optional[TimeOffset] = None
    source_address: Optional[str] = None
    displayed_time: Optional[str] = None
    dark_mode: Optional[bool] = None


class SyncSession:
    """Glue between a sync source, the projector and whoever renders."""

    def __init__(
        self,
        source: SyncSource,
        preferences: Optional[PreferenceStore] = None,
        interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        clock: Callable[[], int] = wall_clock_ms,
        prefers_dark: Callable[[], bool] = system_prefers_dark,
        formatter: Callable[[int], str] = format_instant,
    ):
        self.source = source
        self.preferences = preferences
        self.clock = clock
        self.prefers_dark = prefers_dark
        self.formatter = formatter
        self.state = DisplayState()
        self.projector = LiveClockProjector(self._on_tick, interval_ms=interval_ms, clock=clock)
        self._listeners: List[Callable[[DisplayState], None]] = []
        self._sequence = 0

    def subscribe(self, listener: Callable[[DisplayState], None]) -> None:
        self._listeners.append(listener)

    def open(self) -> DisplayState:
        """Load the theme: stored preference, else the computed default."""
        if self.preferences is not None:
            dark = load_dark_mode(self.preferences, self.prefers_dark)
        else:
            dark = self.prefers_dark()
        self.state.dark_mode = dark
        self._notify()
        return self.state

    def toggle_dark_mode(self) -> bool:
        self.state.dark_mode = not bool(self.state.dark_mode)
        if self.preferences is not None:
            save_dark_mode(self.preferences, self.state.dark_mode)
        self._notify()
        return self.state.dark_mode

    async def sync(self, raw_address: Optional[str]) -> DisplayState:
        """
        Run one sync attempt against the source.

        Only the latest call may change the synced state: a result arriving
        after a newer sync started is dropped.
        """
        self._sequence += 1
        sequence = self._sequence
        self.state.is_syncing = True
        self.state.last_error = None
        self._notify()

        try:
            estimate = await self.source.estimate(raw_address)
        except EstimationError as e:
            if sequence == self._sequence:
                self._fail(e.message)
            return self.state
        except Exception as e:
            logger.error("sync_crashed", error=str(e), exc_info=True)
            if sequence == self._sequence:
                self._fail(FETCH_FAILED)
            return self.state

        if sequence != self._sequence:
            logger.debug("stale_sync_dropped", url=estimate.canonical_origin)
            return self.state

        offset = estimate.estimated_time_ms - self.clock()
        self.state.active_offset = TimeOffset(offset)
        self.state.source_address = estimate.canonical_origin
        self.state.displayed_time = self.formatter(estimate.estimated_time_ms)
        self.state.is_syncing = False
        self.projector.activate(offset)
        logger.info("sync_succeeded", url=estimate.canonical_origin, offset_ms=offset)
        self._notify()
        return self.state

    async def close(self) -> None:
        """Stop ticking. Results of syncs still in flight are dropped."""
        self._sequence += 1
        self.state.is_syncing = False
        await self.projector.aclose()

    def snapshot(self) -> DisplayState:
        return replace(self.state)

    def _fail(self, message: str) -> None:
        self.projector.deactivate()
        self.state.active_offset = None
        self.state.source_address = None
        self.state.displayed_time = None
        self.state.last_error = message
        self.state.is_syncing = False
        logger.info("sync_failed", error=message)
        self._notify()

    def _on_tick(self, instant_ms: int) -> None:
        if self.state.active_offset is None:
            return
        self.state.displayed_time = self.formatter(instant_ms)
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self.state)
