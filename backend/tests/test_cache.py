import threading

from jobscout.schemas.job_search import JobResult
from jobscout.services.cache import DetailCache, DetailRecord, SessionCache, TTLCache


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def _results(count):
    return [
        JobResult(title=f"Job {i}", url=f"https://www.bayt.com/en/kuwait/job/j-{i}/", source="bayt.com")
        for i in range(count)
    ]


class TestTTLCache:
    def test_entry_lives_until_ttl(self):
        clock = FakeClock()
        cache = TTLCache(ttl=3600, clock=clock)
        cache.set("s1", "value")
        clock.now += 3600 - 0.001
        assert cache.get("s1") == "value"
        clock.now += 0.002
        assert cache.get("s1") is None

    def test_expired_entries_pruned_on_write(self):
        clock = FakeClock()
        cache = TTLCache(ttl=10, clock=clock)
        cache.set("old", 1)
        clock.now += 11
        cache.set("new", 2)
        assert len(cache) == 1

    def test_rewrite_refreshes(self):
        clock = FakeClock()
        cache = TTLCache(ttl=10, clock=clock)
        cache.set("k", 1)
        clock.now += 8
        cache.set("k", 2)
        clock.now += 8
        assert cache.get("k") == 2

    def test_concurrent_writers(self):
        cache = TTLCache(ttl=60)

        def writer(prefix):
            for i in range(200):
                cache.set(f"{prefix}-{i}", i)
                cache.get(f"{prefix}-{i // 2}")

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 800


class TestSessionCache:
    def test_put_caps_results(self):
        cache = SessionCache(ttl=60, max_results=20)
        cache.put("session-1", _results(25))
        assert len(cache.get("session-1")) == 20

    def test_unknown_session(self):
        assert SessionCache(ttl=60).get("nope") is None

    def test_last_writer_wins(self):
        cache = SessionCache(ttl=60)
        cache.put("session-1", _results(3))
        cache.put("session-1", _results(1))
        assert len(cache.get("session-1")) == 1


class TestDetailCache:
    def test_expires_after_six_hours_by_default(self):
        clock = FakeClock()
        cache = DetailCache(clock=clock)
        cache.set("https://kw.indeed.com/viewjob?jk=1", DetailRecord(salary="KWD 900"))
        clock.now += 6 * 3600 - 1
        assert cache.get("https://kw.indeed.com/viewjob?jk=1").salary == "KWD 900"
        clock.now += 2
        assert cache.get("https://kw.indeed.com/viewjob?jk=1") is None

    def test_record_stamped_with_fetch_time(self):
        clock = FakeClock()
        cache = DetailCache(ttl=60, clock=clock)
        cache.set("https://kw.indeed.com/viewjob?jk=2", DetailRecord(salary="KWD 700"))
        assert cache.get("https://kw.indeed.com/viewjob?jk=2").fetched_at == clock.now

    def test_expiry_counts_from_fetched_at(self):
        clock = FakeClock()
        cache = DetailCache(ttl=60, clock=clock)
        cache.set("https://kw.indeed.com/viewjob?jk=3", DetailRecord(salary="KWD 800", fetched_at=clock.now - 50))
        clock.now += 9
        assert cache.get("https://kw.indeed.com/viewjob?jk=3").salary == "KWD 800"
        clock.now += 1
        assert cache.get("https://kw.indeed.com/viewjob?jk=3") is None
