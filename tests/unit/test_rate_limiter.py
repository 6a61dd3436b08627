"""Tests for the fixed window rate limiter and client identification."""

import pytest
from starlette.requests import Request

from litquery.api.rate_limiter import FixedWindowRateLimiter, client_id
from litquery.exceptions import RateLimitError


class TickingClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter(window_seconds=60, max_requests=3, max_concurrent=1, clock=clock)


def test_fourth_request_in_window_rejected(limiter):
    for _ in range(3):
        limiter.acquire("1.2.3.4")
    with pytest.raises(RateLimitError) as exc:
        limiter.acquire("1.2.3.4")
    assert exc.value.retry_after == 60


def test_clients_counted_separately(limiter):
    for _ in range(3):
        limiter.acquire("a")
    limiter.acquire("b")


def test_window_resets_after_lapse(limiter, clock):
    for _ in range(3):
        limiter.acquire("a")
    clock.now += 61
    limiter.acquire("a")
    assert limiter.snapshot("a").count == 1


def test_retry_after_counts_down(limiter, clock):
    for _ in range(3):
        limiter.acquire("a")
    clock.now += 30.5
    with pytest.raises(RateLimitError) as exc:
        limiter.acquire("a")
    assert exc.value.retry_after == 30


def test_refused_request_not_counted(limiter):
    for _ in range(3):
        limiter.acquire("a")
    with pytest.raises(RateLimitError):
        limiter.acquire("a")
    assert limiter.snapshot("a").count == 3


def test_concurrent_slot_held_until_release(limiter):
    limiter.acquire("a", concurrent=True)
    with pytest.raises(RateLimitError):
        limiter.acquire("a", concurrent=True)
    assert limiter.snapshot("a").count == 1

    limiter.release("a")
    limiter.acquire("a", concurrent=True)


def test_in_flight_slot_survives_window_reset(limiter, clock):
    limiter.acquire("a", concurrent=True)
    clock.now += 120
    with pytest.raises(RateLimitError):
        limiter.acquire("a", concurrent=True)
    limiter.acquire("a")


def test_release_without_slot_is_harmless(limiter):
    limiter.release("nobody")
    limiter.acquire("a")
    limiter.release("a")
    assert limiter.snapshot("a").active == 0


def test_lapsed_idle_windows_dropped(limiter, clock):
    limiter.acquire("a")
    limiter.acquire("b")
    limiter.acquire("d", concurrent=True)
    clock.now += 61
    limiter.acquire("c")
    assert limiter.snapshot("a") is None
    assert limiter.snapshot("b") is None
    assert limiter.snapshot("d") is not None
    assert limiter.snapshot("c").count == 1


def _request(headers=None, client=("9.9.9.9", 5000)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/query/jobs",
        "headers": [(k.encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_client_id_prefers_forwarded_for():
    request = _request({"x-forwarded-for": "1.2.3.4, 10.0.0.1", "x-real-ip": "5.5.5.5"})
    assert client_id(request) == "1.2.3.4"


def test_client_id_falls_back_to_real_ip():
    assert client_id(_request({"x-real-ip": "5.5.5.5"})) == "5.5.5.5"


def test_client_id_uses_socket_address():
    assert client_id(_request()) == "9.9.9.9"
    assert client_id(_request(client=None)) == "unknown"
