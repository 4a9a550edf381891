"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

queries_started = Counter(
    "semantic_queries_started_total",
    "Total number of metric queries started",
)

queries_succeeded = Counter(
    "semantic_queries_succeeded_total",
    "Total number of metric queries succeeded",
)

queries_failed = Counter(
    "semantic_queries_failed_total",
    "Total number of metric queries failed",
    ["error_code"],
)

query_duration_seconds = Histogram(
    "semantic_query_duration_seconds",
    "Duration of metric queries in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60],
)

query_rows = Histogram(
    "semantic_query_rows",
    "Number of result rows per metric query",
    buckets=[1, 10, 100, 1000, 10000],
)
