"""
Base SQL dialect.

A dialect turns logically equivalent operations (identifier quoting,
string literals, pagination, common functions, metadata introspection)
into engine-correct SQL. Dialects are stateless and never touch a
connection.
"""

from src.utils.exceptions import UnsupportedEngineError
from src.utils.sql_safety import (
    validate_identifier,
    validate_integer_param,
    validate_string_literal,
)


class SQLDialect:
    """
    ANSI SQL dialect used as the base for every engine variant.

    Subclasses override the quote characters and whichever syntax rules
    differ for their engine.
    """

    name = "ANSI SQL"
    quote_char = '"'
    close_quote_char = '"'
    supports_window_functions = True
    supports_cte = True
    case_sensitive = False
    supports_three_part_names = False
    supports_top = False
    catalog_per_table = False
    # String literals read backslash as an escape character
    backslash_escapes = False

    def quote_identifier(self, identifier: str) -> str:
        """
        Quote a single identifier segment (table, column, schema or database).

        The closing quote character is escaped by doubling it, so any name
        round-trips through unquote_identifier().

        Raises:
            InvalidIdentifierError: If the identifier is empty or contains NUL
        """
        validate_identifier(identifier)
        escaped = identifier.replace(self.close_quote_char, self.close_quote_char * 2)
        return f"{self.quote_char}{escaped}{self.close_quote_char}"

    def unquote_identifier(self, quoted: str) -> str:
        """Inverse of quote_identifier(). Unquoted input is returned as-is."""
        if (
            len(quoted) >= 2
            and quoted.startswith(self.quote_char)
            and quoted.endswith(self.close_quote_char)
        ):
            inner = quoted[1:-1]
            return inner.replace(self.close_quote_char * 2, self.close_quote_char)
        return quoted

    def quote_string(self, value: str) -> str:
        """Quote a string literal, doubling embedded single quotes."""
        validate_string_literal(value)
        escaped = value
        if self.backslash_escapes:
            escaped = escaped.replace("\\", "\\\\")
        escaped = escaped.replace("'", "''")
        return f"'{escaped}'"

    def limit_clause(self, limit: int, offset: int | None = None) -> str:
        """Trailing pagination fragment: LIMIT n [OFFSET m]."""
        self._validate_pagination(limit, offset)
        if offset:
            return f"LIMIT {limit} OFFSET {offset}"
        return f"LIMIT {limit}"

    def current_timestamp(self) -> str:
        return "CURRENT_TIMESTAMP"

    def concat(self, *args: str) -> str:
        return f"CONCAT({', '.join(args)})"

    def substring(self, expr: str, start: int, length: int | None = None) -> str:
        if length:
            return f"SUBSTRING({expr}, {start}, {length})"
        return f"SUBSTRING({expr}, {start})"

    def if_null(self, expr: str, replacement: str) -> str:
        return f"COALESCE({expr}, {replacement})"

    def cast(self, expr: str, data_type: str) -> str:
        return f"CAST({expr} AS {data_type})"

    def schema_query(
        self,
        table: str,
        schema: str | None = None,
        database: str | None = None,
    ) -> str:
        """Column metadata for one table (name, type, nullable[, max_length])."""
        return (
            "SELECT COLUMN_NAME AS name, DATA_TYPE AS type, IS_NULLABLE AS nullable\n"
            "FROM INFORMATION_SCHEMA.COLUMNS\n"
            f"WHERE TABLE_NAME = {self.quote_string(table)}\n"
            "ORDER BY ORDINAL_POSITION"
        )

    def catalog_query(self, database: str | None = None) -> str:
        """
        Column listing for every user table and view in the connected database.

        Rows carry schema_name, table_name, table_type, column_name,
        data_type, is_nullable and is_primary.
        """
        raise UnsupportedEngineError(
            f"Metadata fetch is not supported for {self.name}"
        )

    def _validate_pagination(self, limit: int, offset: int | None) -> None:
        validate_integer_param(limit, "limit")
        if offset is not None:
            validate_integer_param(offset, "offset")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
