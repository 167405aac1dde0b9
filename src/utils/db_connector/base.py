"""
Connector base class.

A connector opens one connection for one statement and always releases
it. acquire() owns the connection lifecycle and the connection metrics;
execute() adds tracing, statement metrics and error translation. Engine
subclasses only implement _connect() and, when the driver is not DB-API
shaped, _run().
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from src.utils.exceptions import AgentError, DatabaseConnectionError, QueryError
from src.utils.metrics.database import (
    DB_CONNECTION_ERRORS,
    DB_CONNECTIONS_OPEN,
    DB_QUERIES_TOTAL,
    DB_QUERY_DURATION,
)
from src.utils.tracing import trace_database_query

from .config import ConnectionConfig

logger = logging.getLogger(__name__)


@dataclass
class ResultSet:
    """Rows of one statement, normalized across drivers."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    fields: list[str] = field(default_factory=list)

    @classmethod
    def from_rows(cls, fields: list[str], rows: list[dict[str, Any]]) -> "ResultSet":
        return cls(rows=rows, row_count=len(rows), fields=fields)

    def to_dict(self) -> dict[str, Any]:
        return {"rows": self.rows, "rowCount": self.row_count, "fields": self.fields}


class BaseConnector:
    """
    Base class for single-statement database connectors.

    Args:
        config: Target database
    """

    def __init__(self, config: ConnectionConfig):
        self.config = config

    @property
    def engine(self) -> str:
        return self.config.type

    def _connect(self) -> Any:
        """Open a driver connection. Must be implemented by subclasses."""
        raise NotImplementedError

    def _close(self, conn: Any) -> None:
        conn.close()

    def _run(self, conn: Any, statement: str) -> ResultSet:
        """Execute on a DB-API connection and materialize every row."""
        cursor = conn.cursor()
        try:
            cursor.execute(statement)
            if cursor.description is None:
                affected = cursor.rowcount if cursor.rowcount and cursor.rowcount > 0 else 0
                return ResultSet(rows=[], row_count=affected, fields=[])

            fields = [column[0] for column in cursor.description]
            rows = [dict(zip(fields, record)) for record in cursor.fetchall()]
            return ResultSet.from_rows(fields, rows)
        finally:
            cursor.close()

    @contextmanager
    def acquire(self) -> Iterator[Any]:
        """
        Open a connection and guarantee it is closed on every exit path.

        Raises:
            DatabaseConnectionError: If the driver cannot connect
        """
        try:
            conn = self._connect()
        except AgentError:
            DB_CONNECTION_ERRORS.labels(engine=self.engine).inc()
            raise
        except Exception as e:
            DB_CONNECTION_ERRORS.labels(engine=self.engine).inc()
            raise DatabaseConnectionError(
                f"Failed to connect to {self.config.describe()}: {e}"
            ) from e

        DB_CONNECTIONS_OPEN.labels(engine=self.engine).inc()
        try:
            yield conn
        finally:
            try:
                self._close(conn)
            except Exception as e:
                logger.warning(f"Error closing {self.engine} connection: {e}")
            DB_CONNECTIONS_OPEN.labels(engine=self.engine).dec()

    def execute(self, statement: str) -> ResultSet:
        """
        Run one statement on a fresh connection.

        Raises:
            DatabaseConnectionError: Connect/auth failure
            QueryError: The engine rejected the statement
            CapabilityError: The platform cannot reach this target at all
        """
        status = "error"
        start_time = time.perf_counter()

        with trace_database_query(
            self.engine, statement, self.config.host or "local", self.config.database
        ) as span:
            try:
                with self.acquire() as conn:
                    try:
                        result = self._run(conn, statement)
                    except AgentError:
                        raise
                    except Exception as e:
                        raise QueryError(f"{type(e).__name__}: {e}") from e

                status = "success"
                span.set_attribute("db.rows", result.row_count)
                return result
            finally:
                DB_QUERIES_TOTAL.labels(engine=self.engine, status=status).inc()
                DB_QUERY_DURATION.labels(engine=self.engine).observe(
                    time.perf_counter() - start_time
                )
