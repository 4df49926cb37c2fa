from __future__ import annotations

from prometheus_client import Histogram

from src.metrics.prometheus import get_prometheus_registry, sanitize_label

LATENCY_BUCKETS = [0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0]

upstream_latency_metric = Histogram(
    "phraselens_upstream_latency_seconds",
    "Gemini API latency per attempt",
    ["operation"],
    buckets=LATENCY_BUCKETS,
    registry=get_prometheus_registry(),
)


def observe_upstream_latency(*, operation: str, latency_seconds: float) -> None:
    upstream_latency_metric.labels(operation=sanitize_label(operation)).observe(max(0.0, float(latency_seconds)))
