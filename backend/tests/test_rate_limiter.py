from portfolio_upload.services.rate_limiter import SlidingWindowRateLimiter, get_client_identifier


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_blocks():
    limiter = SlidingWindowRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())

    assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]


def test_identifiers_are_independent():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    assert limiter.hit("a")
    assert limiter.hit("b")
    assert not limiter.hit("a")


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.hit("a")
    clock.now += 30
    assert limiter.hit("a")
    assert not limiter.hit("a")

    clock.now += 31  # first request left the window
    assert limiter.hit("a")
    assert not limiter.hit("a")


def test_reset_clears_history():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.hit("a")
    limiter.reset()

    assert limiter.hit("a")


def test_client_identifier_precedence():
    assert get_client_identifier({"x-forwarded-for": "9.9.9.9, 10.0.0.1", "x-real-ip": "8.8.8.8"}, "127.0.0.1") == "9.9.9.9"
    assert get_client_identifier({"x-real-ip": "8.8.8.8"}, "127.0.0.1") == "8.8.8.8"
    assert get_client_identifier({}, "127.0.0.1") == "127.0.0.1"
    assert get_client_identifier({}) == "unknown"
