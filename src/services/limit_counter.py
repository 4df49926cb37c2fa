from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateLimitStatus:
    limit: int
    current: int
    reset_after: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.current)

    @property
    def exceeded(self) -> bool:
        return self.current > self.limit


class LimitCounter:
    """In-process fixed-window request counter keyed by scope and client."""

    def __init__(
        self,
        window_seconds: int = 3600,
        *,
        max_keys: int = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._clock = clock
        self._counts: dict[str, tuple[int, int]] = {}
        self._lock = threading.Lock()

    def _window_id(self, now: float) -> int:
        return math.floor(now / self.window_seconds)

    def hit(self, scope: str, entity_id: str, limit: int, amount: int = 1) -> RateLimitStatus:
        now = self._clock()
        window_id = self._window_id(now)
        reset_after = max(1, math.ceil((window_id + 1) * self.window_seconds - now))
        key = f"ratelimit:{scope}:{entity_id}"

        with self._lock:
            stored_window, current = self._counts.get(key, (window_id, 0))
            if stored_window != window_id:
                current = 0
            current += amount
            self._counts[key] = (window_id, current)
            if len(self._counts) > self.max_keys:
                self._prune(window_id)

        return RateLimitStatus(limit=limit, current=current, reset_after=reset_after)

    def _prune(self, window_id: int) -> None:
        stale = [key for key, (stored, _) in self._counts.items() if stored != window_id]
        for key in stale:
            del self._counts[key]

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
