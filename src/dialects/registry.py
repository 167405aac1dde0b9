"""
Dialect registry.

Maps every supported engine type to its dialect. The lookup happens once
per connection config; adding an engine means adding one entry here.
"""

from src.utils.database_types import DatabaseType

from .base import SQLDialect
from .mysql import MariaDBDialect, MySQLDialect
from .oracle import OracleDialect
from .postgres import PostgreSQLDialect, RedshiftDialect
from .sqlite import SQLiteDialect
from .sqlserver import AzureSQLDialect, SQLServerDialect
from .warehouse import DatabricksDialect, SnowflakeDialect

_DIALECTS: dict[DatabaseType, SQLDialect] = {
    DatabaseType.MSSQL: SQLServerDialect(),
    DatabaseType.AZURESQL: AzureSQLDialect(),
    DatabaseType.MYSQL: MySQLDialect(),
    DatabaseType.MARIADB: MariaDBDialect(),
    DatabaseType.POSTGRESQL: PostgreSQLDialect(),
    DatabaseType.REDSHIFT: RedshiftDialect(),
    DatabaseType.ORACLE: OracleDialect(),
    DatabaseType.SNOWFLAKE: SnowflakeDialect(),
    DatabaseType.DATABRICKS: DatabricksDialect(),
    DatabaseType.SQLITE: SQLiteDialect(),
}


def get_dialect(engine: str | DatabaseType | SQLDialect) -> SQLDialect:
    """
    Get the SQL dialect for an engine type.

    Args:
        engine: Engine type string (e.g. "mssql", "postgres"), DatabaseType,
            or an already-resolved dialect

    Returns:
        SQLDialect instance

    Raises:
        UnsupportedEngineError: If the engine type is not registered
    """
    if isinstance(engine, SQLDialect):
        return engine
    return _DIALECTS[DatabaseType.from_string(engine)]


def registered_engines() -> list[str]:
    """Engine type strings with a registered dialect."""
    return [engine.value for engine in _DIALECTS]
