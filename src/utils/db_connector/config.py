"""
Connection configuration.

ConnectionConfig is the immutable description of one database target.
Control-plane payloads arrive in several shapes (camelCase or snake_case
keys, string ports, "yes"/"1" flags, ODBC connection strings, postgres
URLs); from_dict() folds all of them into one form before a connector
sees it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import parse_qs, unquote, urlsplit

from src.utils.database_types import DatabaseType
from src.utils.exceptions import ConfigurationError

_TRUE_FLAGS = ("true", "1", "yes", "y")
_FALSE_FLAGS = ("false", "0", "no", "n")

_SERVER_KEYS = ("server", "data source", "addr", "address", "network address")
_DATABASE_KEYS = ("database", "initial catalog")
_USER_KEYS = ("user id", "uid", "user")
_PASSWORD_KEYS = ("password", "pwd")


def parse_boolean_flag(value: Any) -> bool | None:
    """
    Interpret a loosely typed flag.

    Returns True for true/1/yes/y, False for false/0/no/n (case-insensitive),
    the value itself for real booleans and None for anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_FLAGS:
        return True
    if normalized in _FALSE_FLAGS:
        return False
    return None


def parse_key_value_connection_string(connection_string: str) -> dict[str, str]:
    """Split "Key=Value;Key2=Value2" into a dict with lowercased keys."""
    pairs = {}
    for part in str(connection_string or "").split(";"):
        key, sep, value = part.strip().partition("=")
        key = key.strip().lower()
        if sep and key:
            pairs[key] = value.strip()
    return pairs


def _first(pairs: dict[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        if pairs.get(key):
            return pairs[key]
    return None


def parse_sqlserver_connection_string(
    connection_string: str, engine: DatabaseType
) -> dict[str, Any]:
    """
    Parse an ODBC/ADO style SQL Server connection string.

    "Server=host\\instance" and "Server=host,port" are both understood.
    Flags absent from the string come back as None. Azure SQL never uses
    trusted authentication.
    """
    pairs = parse_key_value_connection_string(connection_string)

    host = instance = None
    port = None
    server = _first(pairs, _SERVER_KEYS)
    if server:
        host, _, instance = server.strip().partition("\\")
        host, _, port_text = host.partition(",")
        host = host.strip() or None
        instance = instance.strip() or None
        if port_text.strip().isdigit() and int(port_text) > 0:
            port = int(port_text)

    trusted_raw = pairs.get("trusted_connection", pairs.get("integrated security"))
    trusted = parse_boolean_flag(trusted_raw)
    # ADO.NET spells integrated auth as "SSPI"
    if trusted is None and str(trusted_raw or "").strip().lower() == "sspi":
        trusted = True

    ssl = parse_boolean_flag(pairs.get("encrypt"))
    is_azure = engine == DatabaseType.AZURESQL

    return {
        "host": host,
        "instance": instance,
        "port": port,
        "database": _first(pairs, _DATABASE_KEYS),
        "username": _first(pairs, _USER_KEYS),
        "password": _first(pairs, _PASSWORD_KEYS),
        "ssl": ssl,
        "trusted": False if is_azure else trusted,
    }


def parse_postgres_url(connection_string: str) -> dict[str, Any] | None:
    """
    Parse a postgres:// or postgresql:// URL.

    Returns None when the string is not a URL of either scheme. SSL stays
    on unless sslmode is "disable" or a false flag.
    """
    parsed = urlsplit(str(connection_string).strip())
    if parsed.scheme.lower() not in ("postgres", "postgresql"):
        return None

    try:
        port = parsed.port
    except ValueError:
        port = None

    query = parse_qs(parsed.query)
    sslmode = (query.get("sslmode") or [None])[0]
    ssl_off = sslmode is not None and (
        sslmode.lower() == "disable" or parse_boolean_flag(sslmode) is False
    )

    return {
        "host": parsed.hostname or None,
        "port": port,
        "database": parsed.path.lstrip("/") or None,
        "username": unquote(parsed.username) if parsed.username else None,
        "password": unquote(parsed.password) if parsed.password else None,
        "schema": (query.get("schema") or ["public"])[0],
        "ssl": not ssl_off,
    }


def _coerce_port(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid port: {value!r}")
    try:
        port = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid port: {value!r}") from None
    if port <= 0 or port > 65535:
        raise ConfigurationError(f"Invalid port: {value!r}")
    return port


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


@dataclass(frozen=True)
class ConnectionConfig:
    """
    One database target.

    port holds the explicitly configured port only; effective_port falls
    back to the engine default. SQL Server instance resolution depends on
    telling the two apart.
    """

    engine: DatabaseType
    host: str | None = None
    port: int | None = None
    database: str | None = None
    username: str | None = None
    password: str | None = None
    ssl: bool = False
    instance: str | None = None
    trusted: bool = False
    schema: str | None = None

    @property
    def type(self) -> str:
        return self.engine.value

    @property
    def effective_port(self) -> int | None:
        return self.port or self.engine.default_port

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConnectionConfig":
        """
        Build a config from a control-plane payload.

        Recognized keys: type, host (or server), port, database, username
        (or user), password, ssl, instance, trusted (or trustedConnection),
        schema and connectionString (or connection_string). Values parsed
        from a connection string take precedence over discrete fields.

        Raises:
            ConfigurationError: Missing type, bad port, non-mapping payload
            UnsupportedEngineError: Unknown engine type
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Connection config must be an object, got {type(data).__name__}"
            )

        engine_raw = _pick(data, "type", "engine")
        if engine_raw is None:
            raise ConfigurationError("Connection config is missing 'type'")
        engine = DatabaseType.from_string(engine_raw)

        fields: dict[str, Any] = {
            "host": _pick(data, "host", "server"),
            "port": _pick(data, "port"),
            "database": _pick(data, "database", "dbname"),
            "username": _pick(data, "username", "user"),
            "password": _pick(data, "password"),
            "ssl": parse_boolean_flag(_pick(data, "ssl", "encrypt")),
            "instance": _pick(data, "instance", "instanceName"),
            "trusted": parse_boolean_flag(
                _pick(data, "trusted", "trustedConnection", "trusted_connection")
            ),
            "schema": _pick(data, "schema"),
        }

        connection_string = _pick(data, "connectionString", "connection_string")
        if connection_string:
            parsed = None
            if engine.is_sqlserver_family:
                parsed = parse_sqlserver_connection_string(connection_string, engine)
            elif engine.is_postgres_family:
                parsed = parse_postgres_url(connection_string)
            if parsed:
                fields.update({k: v for k, v in parsed.items() if v is not None})

        if engine == DatabaseType.AZURESQL:
            fields["trusted"] = False
            if fields["ssl"] is None:
                fields["ssl"] = True

        return cls(
            engine=engine,
            host=str(fields["host"]).strip() if fields["host"] else None,
            port=_coerce_port(fields["port"]),
            database=fields["database"],
            username=fields["username"],
            password=fields["password"],
            ssl=bool(fields["ssl"]),
            instance=fields["instance"],
            trusted=bool(fields["trusted"]),
            schema=fields["schema"],
        )

    @classmethod
    def coerce(cls, value: "ConnectionConfig | Mapping[str, Any]") -> "ConnectionConfig":
        """Accept either a ConnectionConfig or a raw payload mapping."""
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)

    def with_database(self, database: str | None) -> "ConnectionConfig":
        return replace(self, database=database)

    def describe(self) -> str:
        """Password-free target description for logs, e.g. mssql://db01\\SQL2019:1433/sales."""
        host = self.host or ""
        if self.instance:
            host = f"{host}\\{self.instance}"
        port = f":{self.effective_port}" if self.effective_port else ""
        return f"{self.type}://{host}{port}/{self.database or ''}"

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig({self.describe()!r}, username={self.username!r}, "
            f"password={'***' if self.password else None}, ssl={self.ssl}, "
            f"trusted={self.trusted})"
        )
