"""MySQL and MariaDB dialects."""

from .base import SQLDialect


class MySQLDialect(SQLDialect):
    """MySQL: backtick identifiers, LIMIT offset, count."""

    name = "MySQL"
    quote_char = "`"
    close_quote_char = "`"
    supports_three_part_names = True
    backslash_escapes = True

    def limit_clause(self, limit: int, offset: int | None = None) -> str:
        self._validate_pagination(limit, offset)
        if offset:
            return f"LIMIT {offset}, {limit}"
        return f"LIMIT {limit}"

    def current_timestamp(self) -> str:
        return "NOW()"

    def if_null(self, expr: str, replacement: str) -> str:
        return f"IFNULL({expr}, {replacement})"

    def schema_query(
        self,
        table: str,
        schema: str | None = None,
        database: str | None = None,
    ) -> str:
        # A MySQL database is its schema
        table_schema = self.quote_string(database) if database else "DATABASE()"
        return (
            "SELECT COLUMN_NAME AS name, DATA_TYPE AS type, IS_NULLABLE AS nullable,\n"
            "       CHARACTER_MAXIMUM_LENGTH AS max_length\n"
            "FROM INFORMATION_SCHEMA.COLUMNS\n"
            f"WHERE TABLE_SCHEMA = {table_schema} AND TABLE_NAME = {self.quote_string(table)}\n"
            "ORDER BY ORDINAL_POSITION"
        )

    def catalog_query(self, database: str | None = None) -> str:
        if database:
            schema_filter = f"c.TABLE_SCHEMA = {self.quote_string(database)}"
        else:
            schema_filter = (
                "c.TABLE_SCHEMA NOT IN "
                "('mysql', 'information_schema', 'performance_schema', 'sys')"
            )
        return f"""
SELECT
    c.TABLE_SCHEMA AS schema_name,
    c.TABLE_NAME AS table_name,
    CASE WHEN t.TABLE_TYPE = 'VIEW' THEN 'view' ELSE 'table' END AS table_type,
    c.COLUMN_NAME AS column_name,
    c.DATA_TYPE AS data_type,
    c.IS_NULLABLE AS is_nullable,
    CASE WHEN c.COLUMN_KEY = 'PRI' THEN 1 ELSE 0 END AS is_primary
FROM INFORMATION_SCHEMA.COLUMNS c
JOIN INFORMATION_SCHEMA.TABLES t
    ON c.TABLE_SCHEMA = t.TABLE_SCHEMA
    AND c.TABLE_NAME = t.TABLE_NAME
WHERE {schema_filter}
ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION
""".strip()


class MariaDBDialect(MySQLDialect):
    """MariaDB uses MySQL syntax."""

    name = "MariaDB"
