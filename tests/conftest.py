"""
Pytest configuration and fixtures for the ETL agent tests.
Provides markers, environment defaults and shared builders.
"""

import os
import sqlite3
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from src.utils.db_connector import ConnectionConfig, ResultSet


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "property: mark test as property-based test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def set_test_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host settings from leaking into tests."""
    for key in (
        "AGENT_API_KEY", "API_BASE_URL", "POLL_INTERVAL", "HEARTBEAT_INTERVAL",
        "API_TIMEOUT", "METRICS_PORT", "OTLP_ENDPOINT", "MSSQL_ODBC_DRIVER",
        "VAULT_NAMESPACE",
    ):
        monkeypatch.delenv(key, raising=False)

    defaults = {
        "VAULT_ADDR": "http://localhost:8200",
        "VAULT_TOKEN": "dev-root-token",
    }
    for key, value in defaults.items():
        if key not in os.environ:
            monkeypatch.setenv(key, value)


@pytest.fixture
def registry() -> CollectorRegistry:
    """Fresh Prometheus registry per test."""
    return CollectorRegistry()


@pytest.fixture
def pg_config() -> ConnectionConfig:
    return ConnectionConfig.from_dict({
        "type": "postgresql",
        "host": "pg.local",
        "database": "warehouse",
        "username": "etl",
        "password": "secret",
    })


@pytest.fixture
def mssql_config() -> ConnectionConfig:
    return ConnectionConfig.from_dict({
        "type": "mssql",
        "host": "sql01",
        "database": "sales",
        "username": "sa",
        "password": "Passw0rd!",
    })


def make_result_set(rows: list[dict]) -> ResultSet:
    """ResultSet whose fields are the first row's keys."""
    fields = list(rows[0].keys()) if rows else []
    return ResultSet.from_rows(fields, rows)


@pytest.fixture
def sqlite_db(tmp_path: Path):
    """
    Factory for SQLite database files.

    Usage:
        path = sqlite_db("source.db", "CREATE TABLE t (id INTEGER)", "INSERT ...")
    """
    def _create(name: str, *statements: str) -> str:
        path = tmp_path / name
        conn = sqlite3.connect(path)
        try:
            for statement in statements:
                conn.execute(statement)
            conn.commit()
        finally:
            conn.close()
        return str(path)

    return _create


@pytest.fixture
def result_set():
    """The make_result_set builder, as a fixture."""
    return make_result_set
