"""
Row fingerprints.

A fingerprint is the pipe-joined text of a row's comparison columns, in
column order, with None rendered as NULL. It is an equality key, not a
hash: a value containing "|" can make two different rows collide, and 1
and "1" render the same. Both are accepted limitations. Integral floats
render like ints, so an INTEGER column matches a REAL one holding the
same numbers.
"""

from collections.abc import Sequence
from typing import Any

NULL_TOKEN = "NULL"
DELIMITER = "|"


def render_value(value: Any) -> str:
    if value is None:
        return NULL_TOKEN
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def fingerprint(row: dict[str, Any], columns: Sequence[str]) -> str:
    """
    Example:
        >>> fingerprint({"id": 1, "name": None}, ["id", "name"])
        '1|NULL'
    """
    return DELIMITER.join(render_value(row.get(column)) for column in columns)


def index_rows(rows: Sequence[dict[str, Any]], columns: Sequence[str]) -> dict[str, dict[str, Any]]:
    """Fingerprint -> row. The last row wins; first-seen order is kept."""
    indexed = {}
    for row in rows:
        indexed[fingerprint(row, columns)] = row
    return indexed
