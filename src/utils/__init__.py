"""
Shared utilities for the ETL agent.

Provides:
- db_connector: per-engine connection config and statement execution
- logging / metrics / tracing: observability
- vault_client: HashiCorp Vault lookup for the agent key
"""

__version__ = "1.0.0"
__all__ = ["db_connector", "logging", "metrics", "tracing", "vault_client"]
