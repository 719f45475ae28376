"""
Login Throttle - sliding window over failed login attempts.

Only failures are recorded, so a reporter who logs in correctly is never
locked out by earlier successful sessions. State is in-memory and per process.
Client keys are held only as long as their window and are never logged.
"""

import threading
import time
from typing import Callable, Dict, List

from models.exceptions import RateLimitExceededException


class LoginThrottle:
    """Per-client sliding window of failed login timestamps."""

    def __init__(
        self,
        max_failures: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = 1024,
    ):
        self.max_failures = max_failures
        self.window_seconds = window_seconds
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._failures: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._failures)

    def _sweep(self, now: float) -> None:
        # Timestamps per key are ascending, so the last one decides expiry
        window_start = now - self.window_seconds
        expired = [k for k, times in self._failures.items() if times[-1] <= window_start]
        for key in expired:
            del self._failures[key]

    def _recent(self, key: str, now: float) -> List[float]:
        window_start = now - self.window_seconds
        recent = [t for t in self._failures.get(key, []) if t > window_start]
        if recent:
            self._failures[key] = recent
        else:
            self._failures.pop(key, None)
        return recent

    def check(self, key: str) -> None:
        """
        Reject the attempt when the client already used up its failures.

        Args:
            key: Client key (usually the client address)

        Raises:
            RateLimitExceededException: With the seconds until the oldest
                failure leaves the window.
        """
        with self._lock:
            now = self._clock()
            recent = self._recent(key, now)
            if len(recent) >= self.max_failures:
                retry_after = max(1, int(recent[0] + self.window_seconds - now) + 1)
                raise RateLimitExceededException(
                    message="Too many login attempts. Please try again later.",
                    retry_after=retry_after,
                )

    def record_failure(self, key: str) -> None:
        """
        Count one failed attempt for the client.

        Once sweep_threshold clients are tracked, clients whose
        failures all left the window are dropped.
        """
        with self._lock:
            now = self._clock()
            if len(self._failures) >= self.sweep_threshold:
                self._sweep(now)
            recent = self._recent(key, now)
            recent.append(now)
            self._failures[key] = recent

    def remaining(self, key: str) -> int:
        """Failed attempts left before the client gets throttled."""
        with self._lock:
            return max(0, self.max_failures - len(self._recent(key, self._clock())))

    def reset(self) -> None:
        """Forget all recorded failures."""
        with self._lock:
            self._failures.clear()
