"""
HashiCorp Vault client for the agent API key.

Reads from the KV v2 secrets engine over its HTTP API with requests, so
the agent key never has to sit in the environment or a .env file.
"""

import logging
import os
import re
from typing import Any

import requests

from src.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SECRET_PATH = "secret/etl-agent"
DEFAULT_KEY_FIELD = "api_key"

_SAFE_PATH = re.compile(r"^[a-zA-Z0-9/_-]+$")


class VaultClient:
    """
    Minimal KV v2 reader.

    Args:
        vault_addr: Vault server address (default: VAULT_ADDR)
        vault_token: Vault token (default: VAULT_TOKEN)
        namespace: Vault Enterprise namespace, if any
        timeout: HTTP timeout in seconds

    Raises:
        ConfigurationError: If the address or token is missing
    """

    def __init__(
        self,
        vault_addr: str | None = None,
        vault_token: str | None = None,
        namespace: str | None = None,
        timeout: float = 10,
    ):
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_token = vault_token or os.getenv("VAULT_TOKEN")
        self.namespace = namespace or os.getenv("VAULT_NAMESPACE")
        self.timeout = timeout

        if not self.vault_addr:
            raise ConfigurationError(
                "Vault address not provided. Set VAULT_ADDR or pass vault_addr."
            )
        if not self.vault_token:
            raise ConfigurationError(
                "Vault token not provided. Set VAULT_TOKEN or pass vault_token."
            )

        self.vault_addr = self.vault_addr.rstrip("/")

        self.headers = {
            "X-Vault-Token": self.vault_token,
            "Content-Type": "application/json",
        }
        if self.namespace:
            self.headers["X-Vault-Namespace"] = self.namespace

        logger.info(f"Initialized Vault client for {self.vault_addr}")

    @staticmethod
    def _kv2_path(secret_path: str) -> str:
        if not secret_path or not isinstance(secret_path, str):
            raise ConfigurationError("secret_path must be a non-empty string")

        if ".." in secret_path or secret_path.startswith("/") or not _SAFE_PATH.match(secret_path):
            raise ConfigurationError(f"Invalid secret_path: {secret_path}")

        if "/data/" in secret_path:
            return secret_path

        mount, _, rest = secret_path.partition("/")
        return f"{mount}/data/{rest}" if rest else f"{mount}/data"

    def get_secret(self, secret_path: str) -> dict[str, Any]:
        """
        Fetch the data of a KV v2 secret.

        Args:
            secret_path: Path such as "secret/etl-agent"; "/data/" is
                inserted after the mount point when missing

        Raises:
            ConfigurationError: Invalid path, missing secret or empty data
            requests.RequestException: Transport or HTTP failure
        """
        path = self._kv2_path(secret_path)
        url = f"{self.vault_addr}/v1/{path}"
        logger.debug(f"Fetching secret from: {url}")

        response = requests.get(url, headers=self.headers, timeout=self.timeout)
        if response.status_code == 404:
            raise ConfigurationError(f"Secret not found at path: {path}")
        response.raise_for_status()

        secret_data = response.json().get("data", {}).get("data", {})
        if not secret_data:
            raise ConfigurationError(f"No data found in secret at path: {path}")

        return secret_data

    def get_agent_key(
        self,
        secret_path: str = DEFAULT_SECRET_PATH,
        field: str = DEFAULT_KEY_FIELD,
    ) -> str:
        """Read the agent API key from a secret field."""
        secret = self.get_secret(secret_path)
        value = secret.get(field)
        if not value:
            raise ConfigurationError(
                f"Secret at {secret_path} has no '{field}' field"
            )
        logger.info(f"Loaded agent API key from Vault ({secret_path})")
        return value

    def health_check(self) -> bool:
        """True when Vault is initialized and unsealed (active or standby)."""
        url = f"{self.vault_addr}/v1/sys/health"
        try:
            response = requests.get(url, timeout=5)
        except requests.RequestException as e:
            logger.error(f"Vault health check failed: {e}")
            return False
        return response.status_code in (200, 429, 472, 473)


def get_agent_key_from_vault(
    secret_path: str = DEFAULT_SECRET_PATH,
    vault_addr: str | None = None,
    vault_token: str | None = None,
) -> str:
    """Convenience wrapper used by the CLI's --use-vault flag."""
    client = VaultClient(vault_addr=vault_addr, vault_token=vault_token)
    return client.get_agent_key(secret_path)
