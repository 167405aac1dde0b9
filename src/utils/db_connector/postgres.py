"""PostgreSQL and Redshift connector (psycopg2)."""

import logging

import psycopg2
import psycopg2.extensions
from opentelemetry import trace

from src.utils.tracing import trace_operation

from .base import BaseConnector

logger = logging.getLogger(__name__)


class PostgresConnector(BaseConnector):
    """Connector for the PostgreSQL family."""

    def _connect(self) -> psycopg2.extensions.connection:
        config = self.config
        with trace_operation(
            "postgres_connect",
            kind=trace.SpanKind.CLIENT,
            db_host=config.host,
            db_name=config.database,
        ):
            conn = psycopg2.connect(
                host=config.host,
                port=config.effective_port,
                dbname=config.database,
                user=config.username,
                password=config.password,
                sslmode="require" if config.ssl else "disable",
                connect_timeout=10,
                application_name="etl-agent",
            )
            # Read-only statements; no transaction left open on close
            try:
                conn.set_session(autocommit=True)
            except Exception:
                conn.close()
                raise
            return conn

    def _close(self, conn: psycopg2.extensions.connection) -> None:
        if not conn.closed:
            conn.close()
