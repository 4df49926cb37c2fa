from src.metrics.counters import (
    increment_cache_eviction,
    increment_cache_hit,
    increment_cache_miss,
    increment_cache_write,
    increment_classified_error,
    increment_upstream_request,
    increment_upstream_retry,
    increment_usage,
)
from src.metrics.gauges import set_cache_state, set_uptime
from src.metrics.histograms import observe_upstream_latency
from src.metrics.prometheus import get_prometheus_registry

__all__ = [
    "get_prometheus_registry",
    "increment_upstream_request",
    "increment_upstream_retry",
    "increment_classified_error",
    "increment_usage",
    "increment_cache_hit",
    "increment_cache_miss",
    "increment_cache_write",
    "increment_cache_eviction",
    "observe_upstream_latency",
    "set_cache_state",
    "set_uptime",
]
