"""
Per-client fixed window rate limiting
"""
import logging
import math
import threading
import time
from typing import Callable, Dict

from pydantic import BaseModel

from .exceptions import RateLimitException

logger = logging.getLogger(__name__)


class RateLimitEntry(BaseModel):
    count: int = 0
    reset_at: float


class FixedWindowRateLimiter:
    """
    Naive in-memory limiter keyed by client IP.

    Each key gets a window of ``period`` seconds that is reset lazily by the
    first request arriving after ``reset_at``. Expired keys are dropped at most
    once per period when a new window opens. Counters only live as long as
    the process; a scaled-out deployment needs a shared counter instead.
    """

    def __init__(self, calls: int = 20, period: int = 60, clock: Callable[[], float] = time.monotonic):
        self.calls = calls  # Number of calls allowed per window
        self.period = period  # Window length in seconds
        self.clock = clock
        self.clients: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._next_sweep_at = 0.0

    def hit(self, client_ip: str) -> None:
        """
        Count one request for ``client_ip``.

        Raises:
            RateLimitException: If the request exceeds the window's cap
        """
        with self._lock:
            now = self.clock()
            entry = self.clients.get(client_ip)
            if entry is None or now > entry.reset_at:
                if now > self._next_sweep_at:
                    self._sweep(now)
                entry = RateLimitEntry(count=0, reset_at=now + self.period)
                self.clients[client_ip] = entry

            entry.count += 1
            if entry.count <= self.calls:
                return
            retry_after = max(1, math.ceil(entry.reset_at - now))

        logger.warning(f"Rate limit exceeded for {client_ip}")
        raise RateLimitException(
            "Too Many Requests",
            retry_after=retry_after,
            details={"retry_after": retry_after},
        )

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [ip for ip, entry in self.clients.items() if now > entry.reset_at]
        for ip in expired:
            del self.clients[ip]
        self._next_sweep_at = now + self.period
