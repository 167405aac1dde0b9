"""
SQL Server and Azure SQL connector.

SQL authentication and trusted (integrated) authentication both go
through pyodbc. When trusted auth is requested and no SQL Server ODBC
driver is installed, the connector falls back to the sqlcmd utility
(`sqlcmd -E`); with neither available it fails with
IntegratedAuthUnavailableError instead of trying username/password.
"""

import logging
import os
import shutil
import subprocess
from typing import Any, NamedTuple

from opentelemetry import trace

from src.utils.database_types import DatabaseType
from src.utils.exceptions import (
    CapabilityError,
    ConfigurationError,
    DatabaseConnectionError,
    IntegratedAuthUnavailableError,
    QueryError,
)
from src.utils.tracing import trace_operation

from .base import BaseConnector, ResultSet
from .config import ConnectionConfig

try:
    import pyodbc
except ImportError:  # unixODBC shared library missing on this host
    pyodbc = None

logger = logging.getLogger(__name__)

DEFAULT_PORT = 1433

ODBC_DRIVER_CANDIDATES = (
    "ODBC Driver 18 for SQL Server",
    "ODBC Driver 17 for SQL Server",
    "SQL Server Native Client 11.0",
    "SQL Server",
)

# ASCII unit separator: never appears in ordinary column data
SQLCMD_DELIMITER = "\x1f"

_DRIVER_LOOKUP_MARKERS = (
    "IM002",
    "Data source name not found",
    "no default driver specified",
    "Can't open lib",
)

_LOGIN_FAILURE_MARKERS = (
    "Login failed",
    "Login timeout expired",
    "network-related",
    "TCP Provider",
    "Named Pipes Provider",
    "Cannot open database",
)


class ServerTarget(NamedTuple):
    """Resolved endpoint: either host,port or host\\instance, never both."""

    host: str | None
    instance: str | None
    port: int | None

    @property
    def server(self) -> str:
        if self.port:
            return f"{self.host},{self.port}"
        if self.instance:
            return f"{self.host}\\{self.instance}"
        return self.host or ""


def resolve_server_target(config: ConnectionConfig) -> ServerTarget:
    """
    Split host\\instance and decide between instance and port routing.

    An explicit port wins over a named instance, except that a named
    instance on the default port 1433 (non-Azure) keeps instance
    resolution, since named instances rarely listen on 1433.
    """
    host = config.host
    instance = config.instance
    port = config.port

    if host and "\\" in host:
        host, _, named = host.partition("\\")
        instance = instance or named.strip() or None

    explicit_port = bool(port)
    if config.engine != DatabaseType.AZURESQL and instance and port == DEFAULT_PORT:
        explicit_port = False

    if explicit_port:
        instance = None

    return ServerTarget(host=host, instance=instance, port=port if explicit_port else None)


def driver_candidates(preferred: str | None = None) -> list[str]:
    """ODBC driver names to try, preferred (or MSSQL_ODBC_DRIVER) first."""
    names = [preferred or os.getenv("MSSQL_ODBC_DRIVER"), *ODBC_DRIVER_CANDIDATES]
    ordered = []
    for name in names:
        if name and name not in ordered:
            ordered.append(name)
    return ordered


def installed_odbc_drivers() -> list[str]:
    if pyodbc is None:
        return []
    try:
        return list(pyodbc.drivers())
    except pyodbc.Error as e:
        logger.warning(f"[MSSQL] Could not list ODBC drivers: {e}")
        return []


def find_sqlcmd() -> str | None:
    return shutil.which("sqlcmd")


def get_integrated_auth_capabilities(preferred_driver: str | None = None) -> dict[str, Any]:
    """
    Report which integrated-auth paths this host can use.

    Returns:
        {mode, native_available, sqlcmd_available, sqlcmd_path, drivers}
        where mode is "native", "sqlcmd" or "unavailable"
    """
    installed = installed_odbc_drivers()
    drivers = [d for d in driver_candidates(preferred_driver) if d in installed]
    sqlcmd_path = find_sqlcmd()

    if drivers:
        mode = "native"
    elif sqlcmd_path:
        mode = "sqlcmd"
    else:
        mode = "unavailable"

    return {
        "mode": mode,
        "native_available": bool(drivers),
        "sqlcmd_available": sqlcmd_path is not None,
        "sqlcmd_path": sqlcmd_path,
        "drivers": drivers,
    }


def log_integrated_auth_capabilities(preferred_driver: str | None = None) -> dict[str, Any]:
    capabilities = get_integrated_auth_capabilities(preferred_driver)
    if capabilities["mode"] == "unavailable":
        logger.warning(
            "[MSSQL] Windows Authentication unavailable: no SQL Server ODBC driver "
            "and no sqlcmd on PATH. SQL Authentication still works."
        )
    else:
        logger.info(
            f"[MSSQL] Windows Authentication mode: {capabilities['mode']}",
            extra={"drivers": capabilities["drivers"], "sqlcmd_path": capabilities["sqlcmd_path"]},
        )
    return capabilities


def _odbc_value(value: str) -> str:
    """Brace-quote an ODBC attribute value when it contains special characters."""
    value = str(value)
    if any(c in value for c in ";{}=") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


def build_odbc_connection_string(
    driver: str,
    target: ServerTarget,
    config: ConnectionConfig,
    trusted: bool,
) -> str:
    parts = [f"DRIVER={{{driver}}}", f"SERVER={target.server}"]
    if config.database:
        parts.append(f"DATABASE={_odbc_value(config.database)}")
    if trusted:
        parts.append("Trusted_Connection=Yes")
    else:
        parts.append(f"UID={_odbc_value(config.username)}")
        parts.append(f"PWD={_odbc_value(config.password)}")
    parts.append(f"Encrypt={'Yes' if config.ssl else 'No'}")
    parts.append("TrustServerCertificate=Yes")
    return ";".join(parts) + ";"


def _is_driver_lookup_error(error: Exception) -> bool:
    message = str(error)
    return any(marker in message for marker in _DRIVER_LOOKUP_MARKERS)


def parse_sqlcmd_output(output: str) -> ResultSet:
    """
    Parse `sqlcmd -W -s <US>` output: a header line, a dashed underline,
    then one line per row. The literal NULL becomes None; every other
    value stays a string.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return ResultSet()

    fields = lines[0].split(SQLCMD_DELIMITER)
    body = lines[1:]
    if body and set(body[0]) <= {"-", SQLCMD_DELIMITER, " "}:
        body = body[1:]

    rows = []
    for line in body:
        values = line.split(SQLCMD_DELIMITER)
        if len(values) != len(fields):
            logger.debug(f"[MSSQL] Skipping sqlcmd output line: {line!r}")
            continue
        rows.append({
            name: None if value == "NULL" else value
            for name, value in zip(fields, values)
        })

    return ResultSet.from_rows(fields, rows)


class SqlcmdSession:
    """
    Connection stand-in that runs each statement through `sqlcmd -E`.

    Nothing stays open between statements, so close() has nothing to do.
    """

    def __init__(
        self,
        sqlcmd_path: str,
        target: ServerTarget,
        database: str | None,
        encrypt: bool = False,
        login_timeout: int = 10,
    ):
        self.sqlcmd_path = sqlcmd_path
        self.target = target
        self.database = database
        self.encrypt = encrypt
        self.login_timeout = login_timeout

    def command(self, statement: str) -> list[str]:
        cmd = [
            self.sqlcmd_path,
            "-S", self.target.server,
            "-E",
            "-b",
            "-W",
            "-w", "65535",
            "-s", SQLCMD_DELIMITER,
            "-l", str(self.login_timeout),
        ]
        if self.database:
            cmd += ["-d", self.database]
        if self.encrypt:
            cmd += ["-N", "-C"]
        cmd += ["-Q", f"SET NOCOUNT ON; {statement}"]
        return cmd

    def run(self, statement: str) -> ResultSet:
        """
        Raises:
            DatabaseConnectionError: sqlcmd reported a login/network failure
            QueryError: Any other non-zero exit
        """
        completed = subprocess.run(
            self.command(statement),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )

        if completed.returncode != 0:
            message = (completed.stderr or completed.stdout).strip()
            message = message or f"sqlcmd exited with status {completed.returncode}"
            if any(marker in message for marker in _LOGIN_FAILURE_MARKERS):
                raise DatabaseConnectionError(message)
            raise QueryError(message)

        return parse_sqlcmd_output(completed.stdout)

    def close(self) -> None:
        pass


class SQLServerConnector(BaseConnector):
    """
    Connector for SQL Server and Azure SQL.

    Args:
        config: Target database
        preferred_driver: ODBC driver tried first (default: MSSQL_ODBC_DRIVER)
    """

    def __init__(self, config: ConnectionConfig, preferred_driver: str | None = None):
        super().__init__(config)
        self.preferred_driver = preferred_driver
        self.target = resolve_server_target(config)

    @property
    def uses_trusted_auth(self) -> bool:
        return self.config.trusted and self.config.engine != DatabaseType.AZURESQL

    def _available_drivers(self) -> list[str]:
        installed = installed_odbc_drivers()
        return [d for d in driver_candidates(self.preferred_driver) if d in installed]

    def _odbc_connect(self, connection_string: str) -> Any:
        with trace_operation(
            "sqlserver_connect",
            kind=trace.SpanKind.CLIENT,
            db_host=self.target.server,
            db_name=self.config.database,
        ):
            return pyodbc.connect(connection_string, timeout=10, autocommit=True)

    def _connect(self) -> Any:
        if self.uses_trusted_auth:
            return self._connect_trusted()
        return self._connect_sql_auth()

    def _connect_sql_auth(self) -> Any:
        config = self.config
        logger.info(
            f"[MSSQL] Auth mode: SQL, connecting to {self.target.server}, DB: {config.database}",
            extra={
                "usernamePresent": bool(config.username),
                "passwordPresent": bool(config.password),
            },
        )

        if not config.username or not config.password:
            raise ConfigurationError(
                "SQL Authentication requires both username and password. "
                "Enable Trusted Connection for Windows Authentication."
            )

        if pyodbc is None:
            raise CapabilityError(
                "SQL Server connections require pyodbc and an ODBC driver manager (unixODBC)"
            )

        drivers = self._available_drivers()
        if not drivers:
            raise CapabilityError(
                "No SQL Server ODBC driver installed. "
                "Install Microsoft ODBC Driver 17 or 18 for SQL Server."
            )

        return self._odbc_connect(
            build_odbc_connection_string(drivers[0], self.target, config, trusted=False)
        )

    def _connect_trusted(self) -> Any:
        config = self.config
        if config.username or config.password:
            logger.info("[MSSQL] Windows Auth selected; ignoring provided username/password.")
        logger.info(
            f"[MSSQL] Auth mode: Windows, connecting to {self.target.server}, DB: {config.database}"
        )

        tried = []
        for driver in self._available_drivers():
            tried.append(driver)
            logger.info(f"[MSSQL] Windows Auth trying ODBC driver: {driver}")
            try:
                return self._odbc_connect(
                    build_odbc_connection_string(driver, self.target, config, trusted=True)
                )
            except pyodbc.Error as e:
                if not _is_driver_lookup_error(e):
                    raise

        sqlcmd_path = find_sqlcmd()
        if sqlcmd_path:
            logger.info(f"[MSSQL] No usable ODBC driver; using sqlcmd at {sqlcmd_path}")
            return SqlcmdSession(sqlcmd_path, self.target, config.database, encrypt=config.ssl)

        raise IntegratedAuthUnavailableError(
            "Windows Authentication failed: no supported SQL Server ODBC driver found. "
            f"Tried: {', '.join(tried) or 'none installed'}. "
            "Install Microsoft ODBC Driver 17 or 18 for SQL Server (or the sqlcmd "
            "utility), then restart agent."
        )

    def _run(self, conn: Any, statement: str) -> ResultSet:
        if isinstance(conn, SqlcmdSession):
            return conn.run(statement)
        return super()._run(conn, statement)
