"""
CLI command implementations.

- run: poll the control plane and process jobs until stopped
- register: obtain an agent id and key
- compare: run one comparison locally
- capabilities: report SQL Server integrated-auth support
"""

import argparse
import json
import logging
import sys

from src.reconciliation.compare import compare
from src.reconciliation.models import ComparisonRequest
from src.reconciliation.report import (
    export_result_json,
    export_samples_csv,
    format_result_console,
    result_to_json,
)
from src.utils.db_connector import (
    get_integrated_auth_capabilities,
    log_integrated_auth_capabilities,
)
from src.utils.exceptions import AgentError, ConfigurationError, ControlPlaneError
from src.utils.metrics import initialize_metrics
from src.utils.tracing import (
    initialize_tracing,
    setup_auto_instrumentation,
    shutdown_tracing,
)

from ..client import ControlPlaneClient
from ..config import AgentConfig
from ..handlers import build_handlers
from ..jobs import JobSlot
from ..runtime import AgentRuntime
from ..scheduler import AgentScheduler
from .credentials import resolve_agent_key

logger = logging.getLogger(__name__)


def load_config(args: argparse.Namespace) -> AgentConfig:
    """Environment settings with CLI overrides applied."""
    config = AgentConfig.from_env(args.env_file)
    return config.with_overrides(
        api_base_url=getattr(args, "api_url", None),
        api_key=getattr(args, "api_key", None),
        poll_interval_ms=getattr(args, "poll_interval", None),
        heartbeat_interval_ms=getattr(args, "heartbeat_interval", None),
        metrics_port=getattr(args, "metrics_port", None),
        otlp_endpoint=getattr(args, "otlp_endpoint", None),
    )


def build_runtime(config: AgentConfig, api_key: str, metrics: dict | None = None) -> AgentRuntime:
    client = ControlPlaneClient(config.api_base_url, api_key, timeout=config.api_timeout)
    handlers = build_handlers(metrics["comparison"] if metrics else None)
    return AgentRuntime(
        client,
        handlers,
        slot=JobSlot(),
        metrics=metrics["agent"] if metrics else None,
    )


def cmd_run(args: argparse.Namespace) -> None:
    """
    Run the agent until SIGINT/SIGTERM.

    Exits with status 1 on configuration errors, before anything is
    scheduled.
    """
    try:
        config = load_config(args)
        api_key = resolve_agent_key(args, config)
    except ConfigurationError as e:
        logger.error(f"[Agent] {e}")
        sys.exit(1)

    logger.info("[Agent] ETL Agent starting...")
    logger.info(f"[Agent] API: {config.api_base_url}")
    logger.info(f"[Agent] Poll interval: {config.poll_interval_ms}ms")
    logger.info(f"[Agent] Heartbeat interval: {config.heartbeat_interval_ms}ms")
    log_integrated_auth_capabilities(config.odbc_driver)

    if config.otlp_endpoint:
        initialize_tracing(otlp_endpoint=config.otlp_endpoint)
        setup_auto_instrumentation()

    metrics = None
    if config.metrics_port:
        try:
            metrics = initialize_metrics(port=config.metrics_port)
        except RuntimeError as e:
            logger.error(f"[Agent] {e}")
            sys.exit(1)

    runtime = build_runtime(config, api_key, metrics)
    scheduler = AgentScheduler(
        runtime,
        poll_interval=config.poll_interval_seconds,
        heartbeat_interval=config.heartbeat_interval_seconds,
    )
    scheduler.install_signal_handlers()

    try:
        scheduler.start()
    finally:
        runtime.client.close()
        shutdown_tracing()
        logger.info("[Agent] Stopped")


def cmd_register(args: argparse.Namespace) -> None:
    """Register an agent and print the issued credentials."""
    try:
        config = load_config(args)
        client = ControlPlaneClient(config.api_base_url, timeout=config.api_timeout)
        body = client.register(args.project_id, args.agent_name, capacity=args.capacity)
    except (ConfigurationError, ControlPlaneError) as e:
        logger.error(f"Registration failed: {e}")
        sys.exit(1)

    print("Agent registered successfully.")
    print(f"Agent ID: {body.get('agent_id')}")
    print("Add the following to your .env file:")
    print(f"AGENT_API_KEY={body['api_key']}")
    print(f"API_BASE_URL={config.api_base_url}")


def cmd_compare(args: argparse.Namespace) -> None:
    """
    Run one comparison locally.

    Exit status: 0 passed, 1 error, 2 comparison failed.
    """
    if args.format == "csv" and not args.output:
        logger.error("--output is required for csv format")
        sys.exit(1)

    try:
        with open(args.request, encoding="utf-8") as f:
            request = ComparisonRequest.from_dict(json.load(f))
        result = compare(request)
    except (OSError, json.JSONDecodeError, AgentError) as e:
        logger.error(f"Comparison failed: {e}")
        sys.exit(1)

    if args.format == "console":
        print(format_result_console(result))
        if args.output:
            export_result_json(result, args.output)
    elif args.format == "json":
        if args.output:
            export_result_json(result, args.output)
            logger.info(f"Result written to {args.output}")
        else:
            print(result_to_json(result))
    else:
        export_samples_csv(result, args.output)
        logger.info(f"Sample mismatches written to {args.output}")

    sys.exit(0 if result.passed else 2)


def cmd_capabilities(args: argparse.Namespace) -> None:
    print(json.dumps(get_integrated_auth_capabilities(args.odbc_driver), indent=2))
