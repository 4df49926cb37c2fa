from __future__ import annotations

from typing import Protocol

from src.metrics import (
    increment_cache_eviction,
    increment_cache_hit,
    increment_cache_miss,
    increment_cache_write,
)


class CacheMetricsProtocol(Protocol):
    def hit(self) -> None: ...

    def miss(self) -> None: ...

    def write(self) -> None: ...

    def eviction(self) -> None: ...


class NoopCacheMetrics:
    def hit(self) -> None:
        return None

    def miss(self) -> None:
        return None

    def write(self) -> None:
        return None

    def eviction(self) -> None:
        return None


class PrometheusCacheMetrics:
    def __init__(self, cache_type: str = "analyze") -> None:
        self.cache_type = cache_type

    def hit(self) -> None:
        increment_cache_hit(cache_type=self.cache_type)

    def miss(self) -> None:
        increment_cache_miss(cache_type=self.cache_type)

    def write(self) -> None:
        increment_cache_write(cache_type=self.cache_type)

    def eviction(self) -> None:
        increment_cache_eviction(cache_type=self.cache_type)
