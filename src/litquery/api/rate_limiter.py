"""In-memory fixed window rate limiter keyed by client address."""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request

from litquery.exceptions import RateLimitError
from litquery.observability.logger import get_logger

logger = get_logger("rate_limiter")


@dataclass
class ClientWindow:
    count: int
    reset_at: float
    active: int = 0


class FixedWindowRateLimiter:
    """Per-client request counter with an optional in-flight ceiling.

    A window resets lazily on the first request after it lapses, and lapsed
    windows with nothing in flight are dropped once per window. State lives
    in one process, so limits across several workers are approximate.
    """

    def __init__(
        self,
        window_seconds: int = 60,
        max_requests: int = 3,
        max_concurrent: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._max_requests = max_requests
        self._max_concurrent = max_concurrent
        self._clock = clock
        self._windows: dict[str, ClientWindow] = {}
        self._next_prune = 0.0

    def acquire(self, client_id: str, concurrent: bool = False) -> None:
        """Count one request, and with ``concurrent`` take an in-flight slot.

        Raises RateLimitError without counting the request when refused.
        """
        now = self._clock()
        if now >= self._next_prune:
            self._prune(now)
        window = self._windows.get(client_id)
        if window is None or now > window.reset_at:
            active = window.active if window else 0
            window = ClientWindow(count=0, reset_at=now + self._window, active=active)
            self._windows[client_id] = window

        retry_after = max(1, math.ceil(window.reset_at - now))
        if window.count >= self._max_requests:
            logger.warning("rate_limited", client=client_id, count=window.count)
            raise RateLimitError(
                f"Rate limit exceeded (max {self._max_requests} requests per "
                f"{self._window} seconds)",
                retry_after=retry_after,
            )
        if concurrent and window.active >= self._max_concurrent:
            logger.warning("concurrency_limited", client=client_id, active=window.active)
            raise RateLimitError(
                "Too many concurrent requests; wait for the current query to finish",
                retry_after=retry_after,
            )

        window.count += 1
        if concurrent:
            window.active += 1

    def _prune(self, now: float) -> None:
        lapsed = [
            key for key, w in self._windows.items() if now > w.reset_at and w.active == 0
        ]
        for key in lapsed:
            del self._windows[key]
        self._next_prune = now + self._window
        if lapsed:
            logger.debug("rate_limit_windows_pruned", removed=len(lapsed), remaining=len(self._windows))

    def release(self, client_id: str) -> None:
        window = self._windows.get(client_id)
        if window is not None and window.active > 0:
            window.active -= 1

    def snapshot(self, client_id: str) -> ClientWindow | None:
        return self._windows.get(client_id)


def client_id(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None:
        return request.client.host
    return "unknown"
