"""Fixed-window rate limiting."""

from __future__ import annotations

from dataclasses import dataclass

_U64_MAX = 2**64 - 1


def _sat_add(a: int, b: int) -> int:
    return min(a + b, _U64_MAX)


@dataclass(frozen=True)
class RateLimiterConfig:
    max_requests_per_window: int
    window_duration_seconds: int

    def is_enabled(self) -> bool:
        return self.max_requests_per_window > 0 and self.window_duration_seconds > 0


@dataclass
class RateLimiterState:
    """Per-identity state: hits in the current window and when it began."""

    count: int = 0
    window_start: int = 0

    @classmethod
    def starting_at(cls, now: int) -> "RateLimiterState":
        return cls(count=0, window_start=now)

    def record_hit(self, now: int, config: RateLimiterConfig) -> bool:
        """Record one hit at ``now``; returns False if it exceeds the limit."""
        if not config.is_enabled():
            return True
        if now >= _sat_add(self.window_start, config.window_duration_seconds):
            self.window_start = now
            self.count = 0
        following = _sat_add(self.count, 1)
        if following > config.max_requests_per_window:
            return False
        self.count = following
        return True