"""Tests for simsimi.core.rate_limiter.RateLimiter."""
import pytest

from simsimi.core.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def test_allows_up_to_limit_then_blocks(clock):
    limiter = RateLimiter(requests_per_window=3, window_seconds=60, clock=clock)

    assert limiter.is_allowed("1.2.3.4") == (True, 2)
    assert limiter.is_allowed("1.2.3.4") == (True, 1)
    assert limiter.is_allowed("1.2.3.4") == (True, 0)
    assert limiter.is_allowed("1.2.3.4") == (False, 0)


def test_clients_are_limited_independently(clock):
    limiter = RateLimiter(requests_per_window=1, window_seconds=60, clock=clock)

    assert limiter.is_allowed("a")[0] is True
    assert limiter.is_allowed("a")[0] is False
    assert limiter.is_allowed("b")[0] is True


def test_window_slides(clock):
    limiter = RateLimiter(requests_per_window=2, window_seconds=60, clock=clock)

    limiter.is_allowed("client")
    clock.advance(30)
    limiter.is_allowed("client")
    assert limiter.is_allowed("client")[0] is False

    # the first request leaves the window, the second is still inside
    clock.advance(31)
    assert limiter.is_allowed("client") == (True, 0)
    assert limiter.is_allowed("client")[0] is False


def test_rejected_requests_are_not_counted(clock):
    limiter = RateLimiter(requests_per_window=1, window_seconds=10, clock=clock)

    limiter.is_allowed("client")
    for _ in range(5):
        limiter.is_allowed("client")

    clock.advance(10.5)
    assert limiter.is_allowed("client")[0] is True


def test_reset_after_tracks_oldest_request(clock):
    limiter = RateLimiter(requests_per_window=5, window_seconds=60, clock=clock)

    assert limiter.get_reset_after("client") == 0.0

    limiter.is_allowed("client")
    clock.advance(20)
    limiter.is_allowed("client")

    assert limiter.get_reset_after("client") == pytest.approx(40.0)


def test_cleanup_drops_idle_clients(clock):
    limiter = RateLimiter(
        requests_per_window=5,
        window_seconds=60,
        cleanup_interval_seconds=120,
        clock=clock,
    )
    limiter.is_allowed("idle")
    clock.advance(200)
    limiter.is_allowed("active")

    assert "idle" not in limiter._requests
    assert "active" in limiter._requests
