"""
Command-line argument parser configuration.

Defines the etl-agent commands and their options.
"""

import argparse


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="etl-agent",
        description="Job agent for cross-database result-set comparison",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the agent with settings from .env
  etl-agent run

  # Override the control plane and intervals (milliseconds)
  etl-agent run --api-url https://example.supabase.co/functions/v1/etl-api \\
      --poll-interval 2000 --heartbeat-interval 30000

  # Read the agent key from Vault and expose Prometheus metrics
  etl-agent run --use-vault --metrics-port 9108

  # Register a new agent for a project
  etl-agent register --project-id 3f1c... --agent-name warehouse-agent-01

  # Compare two queries locally from a request file
  etl-agent compare --request comparison.json --format console

  # Show which Windows Authentication paths this host supports
  etl-agent capabilities
        """,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit JSON log records",
    )
    parser.add_argument(
        "--log-file",
        help="Also log to this rotating file",
    )
    parser.add_argument(
        "--env-file",
        help="Path of the .env file to load (default: nearest .env)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ========== Run command ==========
    run_parser = subparsers.add_parser("run", help="Poll the control plane and process jobs")
    run_parser.add_argument("--api-url", help="Control-plane base URL (overrides API_BASE_URL)")
    run_parser.add_argument("--api-key", help="Agent key (overrides AGENT_API_KEY)")
    run_parser.add_argument(
        "--use-vault",
        action="store_true",
        help="Fetch the agent key from HashiCorp Vault",
    )
    run_parser.add_argument(
        "--vault-path",
        default="secret/etl-agent",
        help="Vault KV v2 path holding the agent key (default: secret/etl-agent)",
    )
    run_parser.add_argument(
        "--poll-interval",
        type=_positive_int,
        help="Poll interval in milliseconds (default: POLL_INTERVAL or 5000)",
    )
    run_parser.add_argument(
        "--heartbeat-interval",
        type=_positive_int,
        help="Heartbeat interval in milliseconds (default: HEARTBEAT_INTERVAL or 60000)",
    )
    run_parser.add_argument(
        "--metrics-port",
        type=_positive_int,
        help="Expose Prometheus metrics on this port",
    )
    run_parser.add_argument(
        "--otlp-endpoint",
        help="OTLP collector endpoint for traces, e.g. localhost:4317",
    )

    # ========== Register command ==========
    register_parser = subparsers.add_parser("register", help="Register a new agent")
    register_parser.add_argument("--project-id", required=True, help="Project to register under")
    register_parser.add_argument("--agent-name", required=True, help="Display name of the agent")
    register_parser.add_argument(
        "--capacity",
        type=_positive_int,
        default=5,
        help="Advertised capacity (default: 5)",
    )
    register_parser.add_argument("--api-url", help="Control-plane base URL (overrides API_BASE_URL)")

    # ========== Compare command ==========
    compare_parser = subparsers.add_parser(
        "compare", help="Run one comparison locally from a JSON request file"
    )
    compare_parser.add_argument(
        "--request",
        required=True,
        help="JSON file with sourceConnection, targetConnection, sourceQuery, targetQuery",
    )
    compare_parser.add_argument(
        "--format",
        choices=["console", "json", "csv"],
        default="console",
        help="Output format (default: console)",
    )
    compare_parser.add_argument(
        "--output",
        help="Output file (required for csv; json prints to stdout without it)",
    )

    # ========== Capabilities command ==========
    capabilities_parser = subparsers.add_parser(
        "capabilities", help="Report Windows Authentication support for SQL Server"
    )
    capabilities_parser.add_argument(
        "--odbc-driver",
        help="Preferred ODBC driver name (overrides MSSQL_ODBC_DRIVER)",
    )

    return parser
