import pytest

from jobscout.services.rate_limit import FixedWindowRateLimiter, RateLimitExceeded


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestFixedWindowRateLimiter:
    def test_counts_down_then_blocks(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(3, 60, clock=clock)
        assert [limiter.hit("ip").remaining for _ in range(3)] == [2, 1, 0]
        blocked = limiter.hit("ip")
        assert blocked.allowed is False
        assert blocked.reset_at == 1060.0

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.check("ip")
        clock.now += 59
        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.check("ip")
        assert exc_info.value.retry_after == 1
        clock.now += 1
        assert limiter.check("ip").allowed is True

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        limiter.check("rate_limit:job-search-assist:1.1.1.1")
        assert limiter.check("rate_limit:job-search-assist:2.2.2.2").allowed is True
        assert limiter.check("rate_limit:job-search-assist-stream:1.1.1.1").allowed is True

    def test_retry_after_rounds_up(self):
        clock = FakeClock(1000.25)
        limiter = FixedWindowRateLimiter(1, 10, clock=clock)
        limiter.check("ip")
        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.check("ip")
        assert exc_info.value.retry_after == 10
        assert exc_info.value.result.remaining == 0
