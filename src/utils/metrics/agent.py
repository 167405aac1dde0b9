"""
Metrics for the agent runtime: polls, heartbeats, jobs and slot usage.
"""

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
)


class AgentMetrics:
    """
    Counters and gauges for one agent process.

    Args:
        registry: Custom Prometheus registry (default: global REGISTRY)
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or REGISTRY

        self.polls_total = Counter(
            "agent_polls_total",
            "Control-plane poll requests",
            ["outcome"],
            registry=self.registry,
        )

        self.heartbeats_total = Counter(
            "agent_heartbeats_total",
            "Heartbeats sent to the control plane",
            ["outcome"],
            registry=self.registry,
        )

        self.jobs_total = Counter(
            "agent_jobs_total",
            "Jobs processed by type and final status",
            ["job_type", "status"],
            registry=self.registry,
        )

        self.job_duration_seconds = Histogram(
            "agent_job_duration_seconds",
            "Wall time spent processing a job",
            ["job_type"],
            buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300, 900, 3600),
            registry=self.registry,
        )

        self.busy = Gauge(
            "agent_busy",
            "1 while a job occupies the agent's slot",
            registry=self.registry,
        )

    def record_poll(self, outcome: str) -> None:
        """outcome is one of: jobs, empty, auth_failed, error, skipped."""
        self.polls_total.labels(outcome=outcome).inc()

    def record_heartbeat(self, success: bool) -> None:
        self.heartbeats_total.labels(outcome="ok" if success else "error").inc()

    def record_job(self, job_type: str, status: str, duration: float) -> None:
        self.jobs_total.labels(job_type=job_type, status=status).inc()
        self.job_duration_seconds.labels(job_type=job_type).observe(duration)

    def set_busy(self, busy: bool) -> None:
        self.busy.set(1 if busy else 0)
