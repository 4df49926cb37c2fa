from __future__ import annotations

import hashlib
import json
import threading
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass
from typing import Any, Callable

from .metrics import CacheMetricsProtocol, NoopCacheMetrics


@dataclass
class CacheEntry:
    key: str
    value: Any
    inserted_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStatistics:
    size: int
    max_size: int
    hits: int
    misses: int
    hit_rate: float

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "size": data["size"],
            "maxSize": data["max_size"],
            "hits": data["hits"],
            "misses": data["misses"],
            "hitRate": data["hit_rate"],
        }


class AnalyzeCache:
    """Bounded in-process LRU cache with per-entry TTL for analysis results.

    Counters are instance-owned and only reset by ``clear`` or
    ``reset_stats``. Values are opaque; callers decide what is worth
    storing (only successful upstream results).
    """

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: int = 3600,
        *,
        update_recency_on_get: bool = True,
        clock: Callable[[], float] = time.monotonic,
        metrics: CacheMetricsProtocol | None = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.update_recency_on_get = update_recency_on_get
        self._clock = clock
        self._metrics = metrics or NoopCacheMetrics()
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def generate_key(content: str, operation_type: str, context: str | None = None) -> str:
        # Image payloads are never part of the key.
        raw = json.dumps([content, operation_type, context or None], ensure_ascii=False, separators=(",", ":"))
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[key]
                entry = None

            if entry is None:
                self._misses += 1
                self._metrics.miss()
                return None

            if self.update_recency_on_get:
                self._entries.move_to_end(key)
            self._hits += 1
            self._metrics.hit()
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds else self.ttl_seconds
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
                self._metrics.eviction()

            self._entries[key] = CacheEntry(key=key, value=value, inserted_at=now, expires_at=now + ttl)
            self._metrics.write()

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def get_remaining_ttl(self, key: str) -> int:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return 0
            return max(0, int(entry.expires_at - self._clock()))

    def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            return removed

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> CacheStatistics:
        with self._lock:
            total = self._hits + self._misses
            return CacheStatistics(
                size=len(self._entries),
                max_size=self.max_entries,
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / total if total > 0 else 0.0,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
