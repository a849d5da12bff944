import math
import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds when the current window ends

    def retry_after(self, now: float) -> int:
        return max(1, math.ceil(self.reset_at - now))


class RateLimitExceeded(Exception):
    def __init__(self, result: RateLimitResult, now: float):
        super().__init__("Too many requests")
        self.result = result
        self.retry_after = result.retry_after(now)


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows of ``window_seconds``."""

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}  # key -> (reset_at, count)
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            self._windows = {k: w for k, w in self._windows.items() if w[0] > now}
            reset_at, count = self._windows.get(key, (now + self.window_seconds, 0))
            if count >= self.max_requests:
                return RateLimitResult(False, self.max_requests, 0, reset_at)
            count += 1
            self._windows[key] = (reset_at, count)
            return RateLimitResult(True, self.max_requests, self.max_requests - count, reset_at)

    def check(self, key: str):
        """Consume one request for ``key``; raises RateLimitExceeded when the window is full."""
        result = self.hit(key)
        if not result.allowed:
            raise RateLimitExceeded(result, self._clock())
        return result

    def reset(self):
        with self._lock:
            self._windows.clear()
