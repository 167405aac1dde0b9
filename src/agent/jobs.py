"""
Job model and the agent's single job slot.
"""

import json
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.utils.exceptions import ConfigurationError, ControlPlaneError


class JobType(str, Enum):
    TEST_CONNECTION = "test_connection"
    FETCH_METADATA = "fetch_metadata"
    ETL_COMPARISON = "etl_comparison"


class JobStatus(str, Enum):
    PENDING = "pending"
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    """
    A unit of work issued by the control plane.

    job_type stays a plain string: unknown types must survive parsing so
    they can be reported back as failed.
    """

    id: str
    job_type: str
    payload: Any = None
    status: JobStatus = JobStatus.PENDING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Job":
        """
        Raises:
            ControlPlaneError: The entry has no id
        """
        if not isinstance(data, Mapping) or data.get("id") in (None, ""):
            raise ControlPlaneError(f"Malformed job in poll response: {data!r}")
        return cls(
            id=str(data["id"]),
            job_type=str(data.get("job_type") or data.get("type") or ""),
            payload=data.get("payload"),
        )

    def decoded_payload(self) -> dict[str, Any]:
        """
        The payload as a dict; JSON-string payloads are decoded.

        Raises:
            ConfigurationError: The payload is not a JSON object
        """
        payload = self.payload
        if payload is None:
            return {}
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Job payload is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ConfigurationError("Job payload must be a JSON object")
        return payload


@dataclass
class PollResult:
    jobs: list[Job] = field(default_factory=list)
    agent_id: str | None = None


class JobSlot:
    """
    At most one job in flight per agent.

    The poll task claims the slot before starting a job and the job
    releases it when done; the heartbeat task only reads it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._job_id: str | None = None

    def try_acquire(self, job_id: str) -> bool:
        with self._lock:
            if self._job_id is not None:
                return False
            self._job_id = job_id
            return True

    def release(self) -> None:
        with self._lock:
            self._job_id = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._job_id is not None

    @property
    def current_job_id(self) -> str | None:
        with self._lock:
            return self._job_id
