"""
Clock and repeating timer primitives
"""
import asyncio
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

monotonic_clock: Clock = time.monotonic


class RepeatingHandle:
    """Cancellable handle for a callback re-armed every ``interval`` seconds"""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self.loop = loop
        self.interval = interval
        self.callback = callback
        self.cancelled = False
        self._timer: Optional[asyncio.TimerHandle] = None

    def start(self) -> "RepeatingHandle":
        self._timer = self.loop.call_later(self.interval, self._run)
        return self

    def _run(self) -> None:
        if self.cancelled:
            return
        try:
            self.callback()
        except Exception:
            logger.exception("Repeating callback failed")
        if not self.cancelled:
            self._timer = self.loop.call_later(self.interval, self._run)

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioScheduler:
    """Schedules repeating callbacks on the running event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> RepeatingHandle:
        loop = self._loop or asyncio.get_running_loop()
        return RepeatingHandle(loop, interval, callback).start()
