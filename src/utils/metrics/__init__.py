"""
Prometheus metrics for the ETL agent.

Usage:
    from src.utils.metrics import initialize_metrics

    metrics = initialize_metrics(port=9108)
    metrics["agent"].record_poll("jobs")
    metrics["comparison"].record_run("mssql", "postgresql", result)
"""

import logging
from typing import Any

from prometheus_client import CollectorRegistry

from .agent import AgentMetrics
from .comparison import ComparisonMetrics
from .publisher import ApplicationInfo, MetricsPublisher
from .registry import get_or_create_metric

logger = logging.getLogger(__name__)


def create_metrics(registry: CollectorRegistry | None = None) -> dict[str, Any]:
    """Build the agent's metric groups without starting an HTTP server."""
    return {
        "agent": AgentMetrics(registry=registry),
        "comparison": ComparisonMetrics(registry=registry),
        "app_info": ApplicationInfo(registry=registry),
    }


def initialize_metrics(
    port: int = 9108,
    registry: CollectorRegistry | None = None,
) -> dict[str, Any]:
    """
    Build all metric groups and start the scrape endpoint.

    Returns:
        Dictionary with keys publisher, agent, comparison and app_info
    """
    logger.info(f"Initializing metrics on port {port}")

    publisher = MetricsPublisher(port=port, registry=registry)
    publisher.start()

    return {"publisher": publisher, **create_metrics(registry)}


__all__ = [
    "MetricsPublisher",
    "ApplicationInfo",
    "AgentMetrics",
    "ComparisonMetrics",
    "create_metrics",
    "initialize_metrics",
    "get_or_create_metric",
]
