from __future__ import annotations

from prometheus_client import Counter

from src.metrics.prometheus import get_prometheus_registry, sanitize_label

upstream_requests_metric = Counter(
    "phraselens_upstream_requests_total",
    "Total upstream Gemini calls by outcome",
    ["operation", "outcome"],
    registry=get_prometheus_registry(),
)

upstream_retries_metric = Counter(
    "phraselens_upstream_retries_total",
    "Total retries scheduled after transient upstream failures",
    ["operation"],
    registry=get_prometheus_registry(),
)

classified_errors_metric = Counter(
    "phraselens_classified_errors_total",
    "Terminal upstream failures by caller-facing category",
    ["operation", "category"],
    registry=get_prometheus_registry(),
)

input_tokens_metric = Counter(
    "phraselens_input_tokens_total",
    "Total prompt tokens sent upstream",
    ["operation"],
    registry=get_prometheus_registry(),
)

output_tokens_metric = Counter(
    "phraselens_output_tokens_total",
    "Total candidate tokens returned by upstream",
    ["operation"],
    registry=get_prometheus_registry(),
)

spend_metric = Counter(
    "phraselens_spend_usd_total",
    "Estimated upstream spend in USD",
    ["operation"],
    registry=get_prometheus_registry(),
)

cache_hit_metric = Counter(
    "phraselens_cache_hit_total",
    "Total cache hits",
    ["cache_type"],
    registry=get_prometheus_registry(),
)

cache_miss_metric = Counter(
    "phraselens_cache_miss_total",
    "Total cache misses",
    ["cache_type"],
    registry=get_prometheus_registry(),
)

cache_write_metric = Counter(
    "phraselens_cache_write_total",
    "Total cache writes",
    ["cache_type"],
    registry=get_prometheus_registry(),
)

cache_eviction_metric = Counter(
    "phraselens_cache_eviction_total",
    "Total LRU evictions",
    ["cache_type"],
    registry=get_prometheus_registry(),
)


def increment_upstream_request(*, operation: str, outcome: str) -> None:
    upstream_requests_metric.labels(
        operation=sanitize_label(operation),
        outcome=sanitize_label(outcome),
    ).inc()


def increment_upstream_retry(*, operation: str) -> None:
    upstream_retries_metric.labels(operation=sanitize_label(operation)).inc()


def increment_classified_error(*, operation: str, category: str) -> None:
    classified_errors_metric.labels(
        operation=sanitize_label(operation),
        category=sanitize_label(category),
    ).inc()


def increment_usage(*, operation: str, prompt_tokens: int, completion_tokens: int, spend: float) -> None:
    label = sanitize_label(operation)
    input_tokens_metric.labels(operation=label).inc(max(0, int(prompt_tokens)))
    output_tokens_metric.labels(operation=label).inc(max(0, int(completion_tokens)))
    spend_metric.labels(operation=label).inc(max(0.0, float(spend)))


def increment_cache_hit(*, cache_type: str) -> None:
    cache_hit_metric.labels(cache_type=sanitize_label(cache_type)).inc()


def increment_cache_miss(*, cache_type: str) -> None:
    cache_miss_metric.labels(cache_type=sanitize_label(cache_type)).inc()


def increment_cache_write(*, cache_type: str) -> None:
    cache_write_metric.labels(cache_type=sanitize_label(cache_type)).inc()


def increment_cache_eviction(*, cache_type: str) -> None:
    cache_eviction_metric.labels(cache_type=sanitize_label(cache_type)).inc()
