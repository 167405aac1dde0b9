"""
Prometheus HTTP exposition.

MetricsPublisher serves /metrics on a port; ApplicationInfo publishes the
agent's name, version and uptime.
"""

import logging
import time

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Gauge,
    Info,
    start_http_server,
)

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """Starts the Prometheus scrape endpoint once per process."""

    def __init__(
        self,
        port: int = 9108,
        registry: CollectorRegistry | None = None,
    ):
        self.port = port
        self.registry = registry or REGISTRY
        self._server_started = False

    def start(self) -> None:
        """
        Start the metrics HTTP server.

        Raises:
            RuntimeError: If the port is already taken
        """
        if self._server_started:
            logger.warning(f"Metrics server already running on port {self.port}")
            return

        try:
            start_http_server(self.port, registry=self.registry)
        except OSError as e:
            if "Address already in use" in str(e):
                logger.error(f"Metrics port {self.port} already in use")
                raise RuntimeError(
                    f"Metrics server port {self.port} is already in use"
                ) from e
            raise

        self._server_started = True
        logger.info(f"Metrics server started on port {self.port}")

    def is_started(self) -> bool:
        return self._server_started


class ApplicationInfo:
    """Agent name/version info metric plus an uptime gauge."""

    def __init__(
        self,
        app_name: str = "etl-agent",
        version: str = "1.0.0",
        registry: CollectorRegistry | None = None,
    ):
        self.registry = registry or REGISTRY

        self.info = Info(
            "etl_agent",
            "ETL agent metadata",
            registry=self.registry,
        )
        self.info.info({"name": app_name, "version": version})

        self._start_time = time.time()
        self.uptime_seconds = Gauge(
            "etl_agent_uptime_seconds",
            "Agent uptime in seconds",
            registry=self.registry,
        )

    def update_uptime(self) -> None:
        self.uptime_seconds.set(self.get_uptime())

    def get_uptime(self) -> float:
        return time.time() - self._start_time
