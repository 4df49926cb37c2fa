from __future__ import annotations

from prometheus_client import Gauge

from src.metrics.prometheus import get_prometheus_registry, sanitize_label

cache_entries_metric = Gauge(
    "phraselens_cache_entries",
    "Live entries held by the response cache",
    ["cache_type"],
    registry=get_prometheus_registry(),
)

cache_hit_rate_metric = Gauge(
    "phraselens_cache_hit_rate",
    "Hit rate since the cache counters were last reset",
    ["cache_type"],
    registry=get_prometheus_registry(),
)

uptime_metric = Gauge(
    "phraselens_uptime_seconds",
    "Seconds since the application started",
    registry=get_prometheus_registry(),
)


def set_cache_state(*, cache_type: str, size: int, hit_rate: float) -> None:
    label = sanitize_label(cache_type)
    cache_entries_metric.labels(cache_type=label).set(float(size))
    cache_hit_rate_metric.labels(cache_type=label).set(float(hit_rate))


def set_uptime(seconds: float) -> None:
    uptime_metric.set(max(0.0, float(seconds)))
