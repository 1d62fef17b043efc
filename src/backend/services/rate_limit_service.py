"""
In-process fixed-window rate limiting.

Counters live in this process only and reset on restart. Duplicate votes are
rejected by the database, not here.
"""

import asyncio
import time
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class RateLimitService:
    """
    Fixed-window request counter keyed by an arbitrary identifier.

    A window starts at the first request for a key and lasts
    `window_seconds`; at most `limit` requests are allowed inside it.
    """

    # Drop expired windows once the table grows past this size
    PRUNE_THRESHOLD = 10_000

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}  # key -> (window_start, count)
        self._lock = asyncio.Lock()

    async def check_rate_limit(
        self,
        identifier: str,
        limit: int,
        window_seconds: int = 60,
    ) -> tuple[bool, int, int]:
        """
        Check and update the counter for `identifier`.

        Returns:
            Tuple of (is_allowed, remaining_requests, retry_after_seconds)
        """
        async with self._lock:
            now = self._clock()
            start, count = self._windows.get(identifier, (now, 0))
            if now - start >= window_seconds:
                start, count = now, 0

            if count >= limit:
                retry_after = max(1, int(round(start + window_seconds - now)))
                return False, 0, retry_after

            count += 1
            self._windows[identifier] = (start, count)
            if len(self._windows) > self.PRUNE_THRESHOLD:
                self._prune(now, window_seconds)
            return True, limit - count, 0

    def _prune(self, now: float, window_seconds: int) -> None:
        expired = [
            key for key, (start, _) in self._windows.items() if now - start >= window_seconds
        ]
        for key in expired:
            del self._windows[key]
        logger.debug("rate_limit_windows_pruned", removed=len(expired))

    def reset(self, identifier: Optional[str] = None) -> None:
        """Clear one counter, or all of them."""
        if identifier is None:
            self._windows.clear()
        else:
            self._windows.pop(identifier, None)


# Global instance
rate_limit_service = RateLimitService()


def get_rate_limit_service() -> RateLimitService:
    """Dependency for getting the rate limit service."""
    return rate_limit_service
