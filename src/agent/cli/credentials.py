"""
Agent key resolution and logging setup for the CLI.
"""

import argparse
import logging
import os

import requests

from src.utils.exceptions import ConfigurationError
from src.utils.logging import setup_logging
from src.utils.vault_client import get_agent_key_from_vault

from ..config import AgentConfig

logger = logging.getLogger(__name__)


def configure_logging(args: argparse.Namespace) -> None:
    """Set up logging from CLI flags, falling back to LOG_* variables."""
    setup_logging(
        level=args.log_level or os.getenv("LOG_LEVEL", "INFO"),
        log_file=args.log_file or os.getenv("LOG_FILE"),
        json_format=args.log_json or os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
    )


def resolve_agent_key(args: argparse.Namespace, config: AgentConfig) -> str:
    """
    Get the agent key from Vault or from args/environment.

    Raises:
        ConfigurationError: No key available, or Vault could not provide one
    """
    if getattr(args, "use_vault", False):
        try:
            key = get_agent_key_from_vault(args.vault_path)
        except requests.RequestException as e:
            raise ConfigurationError(f"Failed to fetch agent key from Vault: {e}") from e
        logger.info("Successfully fetched agent key from Vault")
        return key

    return config.require_api_key()
