"""SQLite dialect."""

from .base import SQLDialect


class SQLiteDialect(SQLDialect):
    """
    SQLite dialect.

    SQLite has no information_schema: per-table metadata comes from
    PRAGMA table_info and the catalog is read one table at a time.
    """

    name = "SQLite"
    catalog_per_table = True

    def current_timestamp(self) -> str:
        return "DATETIME('now')"

    def concat(self, *args: str) -> str:
        return " || ".join(args)

    def substring(self, expr: str, start: int, length: int | None = None) -> str:
        if length:
            return f"SUBSTR({expr}, {start}, {length})"
        return f"SUBSTR({expr}, {start})"

    def if_null(self, expr: str, replacement: str) -> str:
        return f"IFNULL({expr}, {replacement})"

    def schema_query(
        self,
        table: str,
        schema: str | None = None,
        database: str | None = None,
    ) -> str:
        return f"PRAGMA table_info({self.quote_identifier(table)})"

    def catalog_query(self, database: str | None = None) -> str:
        """Table and view listing; columns are fetched with schema_query()."""
        return (
            "SELECT 'main' AS schema_name, name AS table_name, type AS table_type\n"
            "FROM sqlite_master\n"
            "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%'\n"
            "ORDER BY name"
        )
