"""
Connection executor.

Usage:
    from src.utils.db_connector import execute_query, test_connection

    result = execute_query({"type": "postgresql", "host": "db", ...}, "SELECT 1")
    result.rows, result.row_count, result.fields

Every call opens its own connection and closes it before returning,
whether the statement succeeded or not.
"""

import logging
from collections.abc import Mapping
from typing import Any

from src.utils.database_types import DatabaseType
from src.utils.exceptions import UnsupportedEngineError

from .base import BaseConnector, ResultSet
from .config import ConnectionConfig, parse_boolean_flag
from .mysql import MySQLConnector
from .postgres import PostgresConnector
from .sqlite import SQLiteConnector
from .sqlserver import (
    SQLServerConnector,
    get_integrated_auth_capabilities,
    log_integrated_auth_capabilities,
    resolve_server_target,
)

logger = logging.getLogger(__name__)

PROBE_STATEMENT = "SELECT 1"

_CONNECTORS: dict[DatabaseType, type[BaseConnector]] = {
    DatabaseType.POSTGRESQL: PostgresConnector,
    DatabaseType.REDSHIFT: PostgresConnector,
    DatabaseType.MYSQL: MySQLConnector,
    DatabaseType.MARIADB: MySQLConnector,
    DatabaseType.MSSQL: SQLServerConnector,
    DatabaseType.AZURESQL: SQLServerConnector,
    DatabaseType.SQLITE: SQLiteConnector,
}


def get_connector(config: ConnectionConfig | Mapping[str, Any]) -> BaseConnector:
    """
    Select the connector for a config.

    Raises:
        UnsupportedEngineError: The engine has a dialect but no executor
            (oracle, snowflake, databricks) or is unknown
    """
    config = ConnectionConfig.coerce(config)
    connector_cls = _CONNECTORS.get(config.engine)
    if connector_cls is None:
        raise UnsupportedEngineError(f"Unsupported database type: {config.type}")
    return connector_cls(config)


def executable_engines() -> list[str]:
    return [engine.value for engine in _CONNECTORS]


def execute_query(config: ConnectionConfig | Mapping[str, Any], statement: str) -> ResultSet:
    """
    Run one statement against a target on a short-lived connection.

    Raises:
        ConfigurationError: Bad or unsupported config
        DatabaseConnectionError: Connect/auth failure
        QueryError: Statement rejected
        CapabilityError: Platform lacks the needed driver
    """
    connector = get_connector(config)
    logger.debug(f"Executing on {connector.config.describe()}")
    return connector.execute(statement)


def test_connection(config: ConnectionConfig | Mapping[str, Any]) -> dict[str, Any]:
    """
    Probe a target with SELECT 1.

    Never raises: any failure comes back as {"success": False, "error": ...}.
    """
    try:
        execute_query(config, PROBE_STATEMENT)
    except Exception as e:
        logger.error(f"[dbConnector] Connection test failed: {e}")
        return {"success": False, "error": str(e)}
    return {"success": True}


# Not a pytest test despite the name
test_connection.__test__ = False

__all__ = [
    "BaseConnector",
    "ConnectionConfig",
    "ResultSet",
    "SQLServerConnector",
    "PostgresConnector",
    "MySQLConnector",
    "SQLiteConnector",
    "execute_query",
    "executable_engines",
    "get_connector",
    "get_integrated_auth_capabilities",
    "log_integrated_auth_capabilities",
    "parse_boolean_flag",
    "resolve_server_target",
    "test_connection",
]
