"""Safe registration helper for module-level collectors."""

from collections.abc import Callable
from typing import TypeVar

from prometheus_client import REGISTRY, CollectorRegistry

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric, or return the one already registered under its name.

    Args:
        metric_factory: Callable that creates the metric (e.g. lambda: Counter(...))
        metric_name: Registered name used for lookup on conflict
        registry: Prometheus registry to use (default: global REGISTRY)

    Example:
        QUERIES = get_or_create_metric(
            lambda: Counter("db_queries_total", "Statements", ["engine"]),
            "db_queries_total",
        )
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise
