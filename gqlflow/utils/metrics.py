"""Prometheus metrics for the query pipeline.

All metric objects are defined at import time on the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

graphql_requests_total = Counter(
    "graphql_requests_total",
    "Number of executed GraphQL operations",
    ["operation", "status"],
)
graphql_validation_failures_total = Counter(
    "graphql_validation_failures_total",
    "Queries rejected before execution",
    ["code"],
)
graphql_execution_duration_seconds = Histogram(
    "graphql_execution_duration_seconds",
    "Time spent in the middleware chain and resolver",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

__all__ = [
    "graphql_requests_total",
    "graphql_validation_failures_total",
    "graphql_execution_duration_seconds",
]
