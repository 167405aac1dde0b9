"""
Database type enumeration for type-safe engine identification.

Connection payloads carry the engine as a free-form string; this enum is the
single place where those strings are validated and grouped into families.
"""

from enum import Enum

from .exceptions import UnsupportedEngineError


class DatabaseType(str, Enum):
    """
    Enumeration of supported database engines.

    Inherits from str for JSON serialization compatibility and
    easy comparison with string values.
    """

    POSTGRESQL = "postgresql"
    REDSHIFT = "redshift"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    MSSQL = "mssql"
    AZURESQL = "azuresql"
    ORACLE = "oracle"
    SNOWFLAKE = "snowflake"
    DATABRICKS = "databricks"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, value: str) -> "DatabaseType":
        """
        Resolve an engine type string, accepting common aliases.

        Args:
            value: Engine type as sent by the control plane (case-insensitive)

        Returns:
            DatabaseType enum value

        Raises:
            UnsupportedEngineError: If the engine type is not registered
        """
        if isinstance(value, cls):
            return value

        normalized = str(value or "").strip().lower()
        normalized = _ALIASES.get(normalized, normalized)

        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedEngineError(f"Unsupported database type: {value}") from None

    @property
    def is_sqlserver_family(self) -> bool:
        return self in (DatabaseType.MSSQL, DatabaseType.AZURESQL)

    @property
    def is_postgres_family(self) -> bool:
        return self in (DatabaseType.POSTGRESQL, DatabaseType.REDSHIFT)

    @property
    def is_mysql_family(self) -> bool:
        return self in (DatabaseType.MYSQL, DatabaseType.MARIADB)

    @property
    def default_port(self) -> int | None:
        """Default TCP port for the engine, None for file or cloud engines."""
        return _DEFAULT_PORTS.get(self)


_ALIASES = {
    "postgres": "postgresql",
    "sqlserver": "mssql",
}

_DEFAULT_PORTS = {
    DatabaseType.POSTGRESQL: 5432,
    DatabaseType.REDSHIFT: 5439,
    DatabaseType.MYSQL: 3306,
    DatabaseType.MARIADB: 3306,
    DatabaseType.MSSQL: 1433,
    DatabaseType.AZURESQL: 1433,
    DatabaseType.ORACLE: 1521,
}
