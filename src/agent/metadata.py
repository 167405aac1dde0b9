"""
Schema metadata fetch.

Produces the nested database -> schema -> table -> column structure the
control plane renders as a tree:

    {"success": True, "databases": [{"name": ..., "schemas": [
        {"name": ..., "tables": [
            {"name": ..., "columns": [
                {"name", "type", "nullable", "isPrimaryKey", "tableType"}]}]}]}]}
"""

import logging
import os
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from src.dialects import get_dialect
from src.utils.database_types import DatabaseType
from src.utils.db_connector import ConnectionConfig, ResultSet, execute_query
from src.utils.exceptions import UnsupportedEngineError
from src.utils.tracing import trace_function

logger = logging.getLogger(__name__)

_FALLBACK_DATABASE_NAMES = {
    DatabaseType.POSTGRESQL: "POSTGRES_DB",
    DatabaseType.REDSHIFT: "REDSHIFT_DB",
    DatabaseType.MYSQL: "MYSQL_DB",
    DatabaseType.MARIADB: "MARIADB_DB",
    DatabaseType.MSSQL: "MSSQL_DB",
    DatabaseType.AZURESQL: "MSSQL_DB",
    DatabaseType.SQLITE: "main",
}

_TRUTHY = ("1", "yes", "true", "y")


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUTHY


def _table_type(value: Any) -> str:
    return "view" if "view" in str(value or "").lower() else "table"


def nest_catalog_rows(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """
    Group flat catalog rows into schemas and tables, keeping row order.

    Expects schema_name, table_name, table_type, column_name, data_type,
    is_nullable and is_primary on each row. Tables without columns (a
    LEFT JOIN miss) still appear with an empty column list.
    """
    schemas: dict[str, dict[str, dict[str, Any]]] = {}

    for row in rows:
        tables = schemas.setdefault(row["schema_name"], {})
        table = tables.setdefault(
            row["table_name"], {"name": row["table_name"], "columns": []}
        )
        if row.get("column_name"):
            table["columns"].append({
                "name": row["column_name"],
                "type": row.get("data_type"),
                "nullable": _flag(row.get("is_nullable")),
                "isPrimaryKey": _flag(row.get("is_primary")),
                "tableType": _table_type(row.get("table_type")),
            })

    return [
        {"name": schema_name, "tables": list(tables.values())}
        for schema_name, tables in schemas.items()
    ]


def _sqlite_catalog_rows(
    config: ConnectionConfig,
    executor: Callable[[ConnectionConfig, str], ResultSet],
) -> list[dict[str, Any]]:
    """SQLite has no column catalog: list tables, then PRAGMA each one."""
    dialect = get_dialect(config.engine)
    tables = executor(config, dialect.catalog_query()).rows

    rows = []
    for table in tables:
        info = executor(config, dialect.schema_query(table["table_name"])).rows
        base = {
            "schema_name": table["schema_name"],
            "table_name": table["table_name"],
            "table_type": table["table_type"],
        }
        if not info:
            rows.append({**base, "column_name": None})
        for column in info:
            rows.append({
                **base,
                "column_name": column["name"],
                "data_type": column["type"],
                "is_nullable": not column["notnull"],
                "is_primary": column["pk"] > 0,
            })
    return rows


def _database_name(config: ConnectionConfig) -> str:
    if config.engine == DatabaseType.SQLITE and config.database:
        return os.path.basename(config.database)
    return config.database or _FALLBACK_DATABASE_NAMES.get(config.engine, config.type)


@trace_function("fetch_metadata", component="metadata")
def fetch_metadata(
    config: ConnectionConfig | Mapping[str, Any],
    executor: Callable[[ConnectionConfig, str], ResultSet] = execute_query,
) -> dict[str, Any]:
    """
    Fetch the schema tree of one database.

    Raises:
        UnsupportedEngineError: Engine outside the PostgreSQL, MySQL,
            SQL Server and SQLite families
        DatabaseConnectionError, QueryError: From the executor
    """
    config = ConnectionConfig.coerce(config)
    engine = config.engine

    if engine not in _FALLBACK_DATABASE_NAMES:
        raise UnsupportedEngineError(
            f"Metadata fetch is supported for PostgreSQL, MySQL, SQL Server and "
            f"SQLite. Received: {config.type}"
        )

    logger.info(f"[Metadata] Fetching metadata for {config.describe()}")

    dialect = get_dialect(engine)
    if dialect.catalog_per_table:
        rows = _sqlite_catalog_rows(config, executor)
    else:
        rows = executor(config, dialect.catalog_query(database=config.database)).rows

    schemas = nest_catalog_rows(rows)
    logger.info(
        f"[Metadata] Fetched {sum(len(s['tables']) for s in schemas)} table(s) "
        f"in {len(schemas)} schema(s)"
    )

    return {
        "success": True,
        "databases": [{"name": _database_name(config), "schemas": schemas}],
    }
