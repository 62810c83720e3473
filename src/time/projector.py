"""Live projection of a remote clock from a fixed offset."""

import asyncio
import time
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TICK_INTERVAL_MS = 100


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class LiveClockProjector:
    """
    Republishes ``clock() + offset`` on a fixed cadence.

    The projector only works from the offset it was activated with: it never
    performs I/O and never re-derives the offset. At most one tick loop runs
    at a time.
    """

    def __init__(
        self,
        publish: Callable[[int], None],
        interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        clock: Callable[[], int] = wall_clock_ms,
    ):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.publish = publish
        self.interval_ms = interval_ms
        self.clock = clock
        self.offset_ms: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def project(self, offset_ms: int) -> int:
        """Remote time now, as seen through ``offset_ms``."""
        return self.clock() + offset_ms

    def activate(self, offset_ms: int) -> asyncio.Task:
        """Start ticking with ``offset_ms``, replacing any running loop.

        Must be called from inside a running event loop.
        """
        self.deactivate()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._tick_loop(offset_ms))
        self.offset_ms = offset_ms
        logger.debug("projector_activated", offset_ms=offset_ms, interval_ms=self.interval_ms)
        return self._task

    def deactivate(self) -> None:
        """Cancel the tick loop. Idempotent."""
        task, self._task = self._task, None
        self.offset_ms = None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("projector_deactivated")

    async def aclose(self) -> None:
        """Deactivate and wait for the cancelled loop to finish."""
        task = self._task
        self.deactivate()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _tick_loop(self, offset_ms: int) -> None:
        interval = self.interval_ms / 1000
        while True:
            try:
                self.publish(self.project(offset_ms))
            except Exception:
                logger.error("tick_publish_failed", offset_ms=offset_ms, exc_info=True)
            await asyncio.sleep(interval)
