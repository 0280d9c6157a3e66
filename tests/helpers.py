"""
Test doubles for time, scheduling and URL signing.
"""
from comite.services.upload_signing_service import UploadSigner

SHARED_SECRET = "test-shared-secret"
PUBLIC_BASE = "https://cdn.example.com/"
READER_ID = "reader-1"


class ManualClock:
    """Clock that only moves when a test says so"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class ManualHandle:
    def __init__(self, interval, callback, next_at):
        self.interval = interval
        self.callback = callback
        self.next_at = next_at
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Repeating timers fired by advancing a ManualClock"""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.handles = []

    def call_every(self, interval, callback):
        handle = ManualHandle(interval, callback, self.clock.now + interval)
        self.handles.append(handle)
        return handle

    @property
    def active(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float):
        target = self.clock.now + seconds
        while True:
            due = [h for h in self.active if h.next_at <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.next_at)
            self.clock.now = handle.next_at
            handle.next_at += handle.interval
            handle.callback()
        self.clock.now = target


class FakeSigner(UploadSigner):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def sign_put(self, object_key, content_type, expires_in, cache_control):
        self.calls.append((object_key, content_type, expires_in, cache_control))
        if self.fail:
            raise RuntimeError("signing backend unavailable")
        return f"https://storage.example.com/bucket/{object_key}?X-Goog-Expires={expires_in}"
