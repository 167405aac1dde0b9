"""
Job handlers.

One function per job type. Each takes the decoded payload and returns
the result_data reported to the control plane; raising marks the job
failed.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from src.reconciliation.compare import compare
from src.reconciliation.models import ComparisonRequest
from src.utils.db_connector import test_connection
from src.utils.exceptions import ConfigurationError, UnknownJobTypeError
from src.utils.metrics.comparison import ComparisonMetrics

from .jobs import Job, JobType
from .metadata import fetch_metadata

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], dict[str, Any]]

_SQLSERVER_TYPES = ("mssql", "azuresql", "sqlserver")


def _connection_payload(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    connection = payload.get("connection")
    if not isinstance(connection, Mapping):
        raise ConfigurationError("Job payload has no 'connection' object")
    return connection


def _target_label(connection: Mapping[str, Any]) -> str:
    return (
        f"{connection.get('type')}://{connection.get('host')}:"
        f"{connection.get('port') or ''}/{connection.get('database')}"
    )


def handle_test_connection(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Probe one connection.

    A failed probe is a normal result ({"success": False, "error": ...}),
    never an exception.
    """
    connection = payload.get("connection")
    if not isinstance(connection, Mapping):
        return {"success": False, "error": "Job payload has no 'connection' object"}

    logger.info(f"[Test] Testing connection to {_target_label(connection)}")
    if str(connection.get("type", "")).lower() in _SQLSERVER_TYPES:
        logger.info(
            "[Test] SQL Server auth payload",
            extra={
                "type": connection.get("type"),
                "trusted": bool(connection.get("trusted")),
                "host": connection.get("host"),
                "port": connection.get("port"),
                "instance": connection.get("instance"),
                "database": connection.get("database"),
                "usernamePresent": bool(connection.get("username")),
                "passwordPresent": bool(connection.get("password")),
            },
        )

    result = test_connection(connection)

    if result["success"]:
        logger.info("[Test] Connection test passed")
    else:
        logger.error(f"[Test] Connection test failed: {result['error']}")
    return result


def handle_fetch_metadata(payload: dict[str, Any]) -> dict[str, Any]:
    connection = _connection_payload(payload)
    result = fetch_metadata(connection)
    logger.info(f"[Metadata] Fetched {len(result.get('databases', []))} database(s)")
    return result


def make_comparison_handler(metrics: ComparisonMetrics | None = None) -> Handler:
    def handle_etl_comparison(payload: dict[str, Any]) -> dict[str, Any]:
        request = ComparisonRequest.from_dict(payload)
        result = compare(request, metrics=metrics)
        summary = result.summary
        logger.info(
            f"[Comparison] Matched: {summary.matched_rows}, "
            f"Mismatched: {summary.mismatched_rows}"
        )
        return result.to_dict()

    return handle_etl_comparison


def build_handlers(comparison_metrics: ComparisonMetrics | None = None) -> dict[str, Handler]:
    """Dispatch table keyed by job type string."""
    return {
        JobType.TEST_CONNECTION.value: handle_test_connection,
        JobType.FETCH_METADATA.value: handle_fetch_metadata,
        JobType.ETL_COMPARISON.value: make_comparison_handler(comparison_metrics),
    }


def dispatch(job: Job, handlers: Mapping[str, Handler]) -> dict[str, Any]:
    """
    Run the handler for a job's type.

    Raises:
        UnknownJobTypeError: No handler for job.job_type
        ConfigurationError: Undecodable payload
    """
    handler = handlers.get(job.job_type)
    if handler is None:
        raise UnknownJobTypeError(job.job_type)
    return handler(job.decoded_payload())
