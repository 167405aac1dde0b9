"""
Agent configuration.

Settings come from the environment, after an optional .env file has been
loaded with python-dotenv. Intervals are given in milliseconds, the way
the control plane documents them.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any

from dotenv import load_dotenv

from src.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:54321/functions/v1/etl-api"
DEFAULT_POLL_INTERVAL_MS = 5000
DEFAULT_HEARTBEAT_INTERVAL_MS = 60000
DEFAULT_API_TIMEOUT = 30.0


def _int_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class AgentConfig:
    """Runtime settings for one agent process."""

    api_key: str | None = None
    api_base_url: str = DEFAULT_API_BASE_URL
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    heartbeat_interval_ms: int = DEFAULT_HEARTBEAT_INTERVAL_MS
    api_timeout: float = DEFAULT_API_TIMEOUT
    metrics_port: int | None = None
    otlp_endpoint: str | None = None
    odbc_driver: str | None = None

    def __post_init__(self):
        errors = []
        if self.poll_interval_ms <= 0:
            errors.append("POLL_INTERVAL must be positive")
        if self.heartbeat_interval_ms <= 0:
            errors.append("HEARTBEAT_INTERVAL must be positive")
        if self.api_timeout <= 0:
            errors.append("API_TIMEOUT must be positive")
        if not self.api_base_url:
            errors.append("API_BASE_URL must not be empty")
        if errors:
            raise ConfigurationError("Configuration errors: " + "; ".join(errors))

        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def heartbeat_interval_seconds(self) -> float:
        return self.heartbeat_interval_ms / 1000

    def require_api_key(self) -> str:
        """
        Raises:
            ConfigurationError: If no agent key is configured
        """
        if not self.api_key:
            raise ConfigurationError(
                "AGENT_API_KEY is required (set it in .env or use --use-vault)"
            )
        return self.api_key

    def with_overrides(self, **overrides: Any) -> "AgentConfig":
        """Copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if k in known and v is not None}
        return replace(self, **changes)

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "AgentConfig":
        """
        Load settings from the environment.

        Args:
            env_file: .env path; the nearest .env is used when omitted.
                Variables already set in the environment win.

        Environment variables:
            API_BASE_URL, AGENT_API_KEY, POLL_INTERVAL (ms),
            HEARTBEAT_INTERVAL (ms), API_TIMEOUT (s), METRICS_PORT,
            OTLP_ENDPOINT, MSSQL_ODBC_DRIVER
        """
        load_dotenv(dotenv_path=env_file)

        config = cls(
            api_key=os.getenv("AGENT_API_KEY") or None,
            api_base_url=os.getenv("API_BASE_URL") or DEFAULT_API_BASE_URL,
            poll_interval_ms=_int_env("POLL_INTERVAL", DEFAULT_POLL_INTERVAL_MS),
            heartbeat_interval_ms=_int_env("HEARTBEAT_INTERVAL", DEFAULT_HEARTBEAT_INTERVAL_MS),
            api_timeout=_float_env("API_TIMEOUT", DEFAULT_API_TIMEOUT),
            metrics_port=_int_env("METRICS_PORT", None),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT") or None,
            odbc_driver=os.getenv("MSSQL_ODBC_DRIVER") or None,
        )
        logger.debug(f"Configuration loaded for {config.api_base_url}")
        return config
