"""MySQL and MariaDB connector (PyMySQL)."""

import pymysql
from opentelemetry import trace

from src.utils.tracing import trace_operation

from .base import BaseConnector


class MySQLConnector(BaseConnector):
    """Connector for the MySQL family."""

    def _connect(self) -> pymysql.connections.Connection:
        config = self.config
        with trace_operation(
            "mysql_connect",
            kind=trace.SpanKind.CLIENT,
            db_host=config.host,
            db_name=config.database,
        ):
            # Encrypted without certificate verification when ssl is set
            ssl = {"check_hostname": False} if config.ssl else None
            return pymysql.connect(
                host=config.host,
                port=config.effective_port,
                user=config.username,
                password=config.password or "",
                database=config.database,
                ssl=ssl,
                connect_timeout=10,
                autocommit=True,
                charset="utf8mb4",
            )
