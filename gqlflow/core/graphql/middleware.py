"""Middleware pipeline.

Middleware wraps the resolution step in onion order: the first registered
middleware sees the query first and the result last.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Tuple

from gqlflow.core.logging.structured import operation_var
from gqlflow.utils.metrics import graphql_execution_duration_seconds, graphql_requests_total

logger = logging.getLogger(__name__)

Result = Dict[str, Any]
Next = Callable[[str], Result]
Middleware = Callable[[str, Next], Result]


def _wrap(middleware: Middleware, next_step: Next) -> Next:
    def step(query: str) -> Result:
        return middleware(query, next_step)

    return step


class MiddlewarePipeline:
    """Ordered middleware around a terminal executor."""

    def __init__(self) -> None:
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> None:
        """Append middleware; registration order is execution order."""
        if not callable(middleware):
            raise TypeError(f"Middleware must be callable, got {type(middleware).__name__}")
        self._middleware.append(middleware)

    def clear(self) -> None:
        self._middleware.clear()

    @property
    def middleware(self) -> Tuple[Middleware, ...]:
        return tuple(self._middleware)

    def __len__(self) -> int:
        return len(self._middleware)

    def build(self, terminal: Next) -> Next:
        """Fold the middleware list last-to-first around ``terminal``.

        ``[mw1, mw2, mw3]`` becomes ``mw1(mw2(mw3(terminal)))``. The chain is
        built per call and never shared between requests.
        """
        chain = terminal
        for middleware in reversed(self._middleware):
            chain = _wrap(middleware, chain)
        return chain

    def execute(self, query: str, terminal: Next) -> Result:
        return self.build(terminal)(query)


# ============================================================================
# Stock middleware
# ============================================================================

def logging_middleware(query: str, next_step: Next) -> Result:
    """Log each execution and whether it produced errors."""
    logger.debug("Executing query", extra={"query_length": len(query)})
    result = next_step(query)
    if result.get("errors"):
        logger.info(
            "Query finished with errors",
            extra={"error_count": len(result["errors"])},
        )
    else:
        logger.debug("Query finished")
    return result


def timing_middleware(query: str, next_step: Next) -> Result:
    """Add ``extensions.timing.duration_ms`` to the envelope."""
    start = time.perf_counter()
    result = next_step(query)
    duration_ms = (time.perf_counter() - start) * 1000
    extensions = result.setdefault("extensions", {})
    extensions["timing"] = {"duration_ms": round(duration_ms, 3)}
    return result


def metrics_middleware(query: str, next_step: Next) -> Result:
    """Record request count and duration, labelled by the resolved operation."""
    start = time.perf_counter()
    result = next_step(query)
    label = operation_var.get() or "unknown"
    graphql_execution_duration_seconds.labels(operation=label).observe(time.perf_counter() - start)
    graphql_requests_total.labels(
        operation=label,
        status="error" if result.get("errors") else "success",
    ).inc()
    return result


__all__ = [
    "Result",
    "Next",
    "Middleware",
    "MiddlewarePipeline",
    "logging_middleware",
    "metrics_middleware",
    "timing_middleware",
]
