"""
Rate Limiter - Control request frequency per client address.

This module provides a simple in-memory sliding window limiter. It is
handed to the API layer as a dependency, so it can be swapped or tested
without touching the store.

For production with multiple instances, upgrade to Redis-backed limiter.
"""
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from simsimi.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Sliding window rate limiter.

    Tracks request timestamps per identifier. A request is allowed when
    fewer than `limit` requests from the same identifier fall inside the
    trailing window; allowed requests are recorded, rejected ones are not.

    Example:
        >>> limiter = RateLimiter(requests_per_window=100)
        >>> limiter.is_allowed("203.0.113.7")
        (True, 99)
    """

    def __init__(
        self,
        requests_per_window: int = 100,
        window_seconds: float = 60.0,
        cleanup_interval_seconds: float = 300.0,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the rate limiter.

        Args:
            requests_per_window: Maximum requests allowed per window
            window_seconds: Length of the sliding window
            cleanup_interval_seconds: How often to drop idle identifiers
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.limit = requests_per_window
        self.window = window_seconds
        self.cleanup_interval = cleanup_interval_seconds
        self._clock = clock or time.monotonic

        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.RLock()
        self._last_cleanup = self._clock()

        logger.info(
            f"RateLimiter initialized: {requests_per_window} requests/{window_seconds:g}s"
        )

    def is_allowed(self, identifier: str) -> Tuple[bool, int]:
        """
        Check and record a request for the given identifier.

        Args:
            identifier: Client IP address

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        with self._lock:
            self._maybe_cleanup()

            now = self._clock()
            recent = self._recent(identifier, now)
            self._requests[identifier] = recent

            if len(recent) >= self.limit:
                logger.warning(f"Rate limit exceeded for: {identifier}")
                return False, 0

            recent.append(now)
            return True, self.limit - len(recent)

    def get_reset_after(self, identifier: str) -> float:
        """
        Seconds until the oldest request in the window expires.

        Returns 0.0 when the identifier has no requests in the window.
        """
        with self._lock:
            now = self._clock()
            recent = self._recent(identifier, now)
            if not recent:
                return 0.0
            return max(0.0, recent[0] + self.window - now)

    def _recent(self, identifier: str, now: float) -> List[float]:
        cutoff = now - self.window
        return [t for t in self._requests.get(identifier, []) if t > cutoff]

    def _maybe_cleanup(self) -> None:
        """Remove idle identifiers periodically."""
        now = self._clock()

        if now - self._last_cleanup < self.cleanup_interval:
            return

        for identifier in list(self._requests.keys()):
            self._requests[identifier] = self._recent(identifier, now)
            if not self._requests[identifier]:
                del self._requests[identifier]

        self._last_cleanup = now
        logger.debug(f"Rate limiter cleanup: {len(self._requests)} active clients")
