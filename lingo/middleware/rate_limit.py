"""
In-memory rate limiting for claim lookups and command parsing.

Single-process only; counts are lost on restart.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable
from datetime import UTC, datetime, timedelta


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RateLimiter:
    """
    Sliding-window rate limiter.

    Keeps one timestamp per accepted request per key (client IP or wallet).
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._requests: dict[str, deque[datetime]] = defaultdict(deque)

    def check_rate_limit(self, key: str, max_requests: int, window_minutes: int = 60) -> bool:
        """
        Check and record a request for key.

        Args:
            key: Identifier to rate limit (IP address or wallet)
            max_requests: Maximum requests allowed in the window
            window_minutes: Window length in minutes (default 60)

        Returns:
            True if under the limit (request recorded), False if limit exceeded
        """
        now = self._clock()
        cutoff = now - timedelta(minutes=window_minutes)
        window = self._requests[key]

        while window and window[0] <= cutoff:
            window.popleft()

        if len(window) >= max_requests:
            return False

        window.append(now)
        return True

    def cleanup_old_entries(self, max_age_hours: int = 2):
        """
        Drop timestamps older than max_age_hours and forget idle keys.

        Args:
            max_age_hours: Remove entries older than this many hours
        """
        cutoff = self._clock() - timedelta(hours=max_age_hours)
        for key in list(self._requests.keys()):
            window = self._requests[key]
            while window and window[0] <= cutoff:
                window.popleft()
            if not window:
                del self._requests[key]


# Global rate limiter instance
rate_limiter = RateLimiter()
