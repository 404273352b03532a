"""In-memory sliding-window rate limiting for the sign-in route."""

import time
from collections import defaultdict
from threading import Lock


class RateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each key.

    Keys are client addresses for sign-in attempts. State lives in process
    memory, so every worker process counts on its own.
    """

    def __init__(self, max_requests: int, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, list[float]] = defaultdict(list)
        self._lock = Lock()

    def is_allowed(self, key: str) -> bool:
        """Record an attempt for ``key``; False once the window is full."""
        now = time.monotonic()
        cutoff = now - self.window_seconds

        with self._lock:
            hits = [t for t in self._hits[key] if t > cutoff]
            if len(hits) >= self.max_requests:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
