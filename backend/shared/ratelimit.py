"""
In-memory request rate limiting.

Fixed windows keyed by caller (user id or client IP). Each API worker keeps
its own counters; this throttles bursts, it is not a quota. Quotas live in
modules.usage.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class RateLimitPolicy:
    max_requests: int
    window_seconds: int


@dataclass
class _Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """
    Counts hits per key within a fixed window that starts at the first hit.

    `hit()` counts and reports whether the request is within the limit.
    `exhausted()` only looks, for callers that count failures alone.
    """

    def __init__(self, policy: RateLimitPolicy, time_fn: Optional[Callable[[], float]] = None):
        self.policy = policy
        self._time_fn = time_fn or time.monotonic
        self._windows: Dict[str, _Window] = {}

    def _window(self, key: str) -> _Window:
        now = self._time_fn()
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.policy.window_seconds:
            window = _Window(started_at=now)
            self._windows[key] = window
        return window

    def exhausted(self, key: str) -> bool:
        return self._window(key).count >= self.policy.max_requests

    def hit(self, key: str) -> bool:
        window = self._window(key)
        if window.count >= self.policy.max_requests:
            return False
        window.count += 1
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until the key's current window closes."""
        window = self._window(key)
        remaining = self.policy.window_seconds - (self._time_fn() - window.started_at)
        return max(1, int(remaining + 0.999))

    def reset(self) -> None:
        self._windows.clear()
