"""
ETL job agent.

Polls the control plane for jobs, runs connection tests, metadata
fetches and comparisons, and reports each outcome back.
"""

from .config import AgentConfig
from .handlers import build_handlers, dispatch
from .jobs import Job, JobSlot, JobStatus, JobType
from .runtime import AgentRuntime

__all__ = [
    "AgentConfig",
    "AgentRuntime",
    "Job",
    "JobSlot",
    "JobStatus",
    "JobType",
    "build_handlers",
    "dispatch",
]
