import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Generic, TypeVar

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Lock-guarded dict whose entries expire ``ttl`` seconds after being written.

    Expired entries are pruned on every read and write rather than by a
    background task.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, V]] = {}  # key -> (written_at, value)
        self._lock = threading.Lock()

    def _prune(self, now: float):
        self._entries = {
            k: entry for k, entry in self._entries.items() if now - entry[0] < self.ttl
        }

    def get(self, key: str) -> V | None:
        with self._lock:
            self._prune(self._clock())
            entry = self._entries.get(key)
            return entry[1] if entry else None

    def set(self, key: str, value: V):
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._entries[key] = (now, value)

    def __len__(self) -> int:
        with self._lock:
            self._prune(self._clock())
            return len(self._entries)


class SessionCache(TTLCache[list[JobResult]]):
    """Most recent result set per chat session."""

    def __init__(self, ttl: float | None = None, max_results: int | None = None, clock=time.time):
        super().__init__(ttl or settings.session_ttl_seconds, clock)
        self.max_results = max_results or settings.session_max_results

    def put(self, session_id: str, results: list[JobResult]):
        self.set(session_id, list(results[: self.max_results]))


@dataclass
class DetailRecord:
    salary: str | None = None
    employment_type: str | None = None
    posted_at: str | None = None
    fetched_at: float | None = None  # epoch seconds; stamped by DetailCache.set when missing


class DetailCache(TTLCache[DetailRecord]):
    """Scraped posting details keyed by posting URL."""

    def __init__(self, ttl: float | None = None, clock=time.time):
        super().__init__(ttl or settings.detail_ttl_seconds, clock)

    def _prune(self, now: float):
        # A record lives for ttl seconds after its page was fetched.
        self._entries = {
            k: entry for k, entry in self._entries.items() if now - entry[1].fetched_at < self.ttl
        }

    def set(self, url: str, record: DetailRecord):
        if record.fetched_at is None:
            record = replace(record, fetched_at=self._clock())
        super().set(url, record)
