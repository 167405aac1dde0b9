"""SQLite connector (standard library driver)."""

import sqlite3
from pathlib import Path

from .base import BaseConnector


class SQLiteConnector(BaseConnector):
    """
    Connector for SQLite files.

    The database field holds the file path. The file is opened read-write
    and must already exist; an empty path opens a private in-memory
    database.
    """

    def _connect(self) -> sqlite3.Connection:
        path = self.config.database
        if not path or path == ":memory:":
            return sqlite3.connect(":memory:", timeout=10)

        uri = f"{Path(path).expanduser().resolve().as_uri()}?mode=rw"
        return sqlite3.connect(uri, uri=True, timeout=10)
