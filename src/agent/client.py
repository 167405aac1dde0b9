"""
HTTP client for the control plane.

Every call carries the agent key in the x-agent-key header. Transport
failures surface as ControlPlaneUnavailableError, 401 responses as
AuthenticationError and any other non-2xx status as ControlPlaneError.
"""

import json
import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from src.utils.exceptions import (
    AuthenticationError,
    ControlPlaneError,
    ControlPlaneUnavailableError,
)
from src.utils.retry import retry_with_backoff
from src.utils.tracing import trace_http_request

from .jobs import Job, JobStatus, PollResult

logger = logging.getLogger(__name__)

AGENT_KEY_HEADER = "x-agent-key"


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


class ControlPlaneClient:
    """
    Thin wrapper around a requests.Session bound to one control plane.

    Args:
        base_url: API base URL, without trailing slash
        api_key: Agent key; only register() may run without one
        timeout: Per-request timeout in seconds
        session: Optional pre-built session (tests pass a mock)
        submit_retries: Retries for result submission on transport failure
        sleep: Sleep function used between retries
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
        submit_retries: int = 2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.submit_retries = submit_retries
        self._sleep = sleep
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({AGENT_KEY_HEADER: api_key})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        url = self._url(path)
        data = json.dumps(body, default=str) if body is not None else None

        with trace_http_request(method, url):
            try:
                response = self.session.request(
                    method, url, data=data, timeout=self.timeout
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                raise ControlPlaneUnavailableError(
                    f"{method} {path} failed: {e}"
                ) from e
            except requests.RequestException as e:
                raise ControlPlaneError(f"{method} {path} failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError(_error_message(response), status_code=401)
        if response.status_code >= 400:
            raise ControlPlaneError(
                f"{method} {path} returned {response.status_code}: "
                f"{_error_message(response)}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def poll_jobs(self) -> PollResult:
        """Fetch pending jobs. Only the first one is ever processed."""
        body = self._request("GET", "/jobs/poll") or {}
        if not isinstance(body, dict) or not isinstance(body.get("jobs") or [], list):
            raise ControlPlaneError(f"Unexpected poll response: {body!r:.200}")
        jobs = [Job.from_dict(entry) for entry in body.get("jobs") or []]
        return PollResult(jobs=jobs, agent_id=body.get("agent_id"))

    def start_job(self, job_id: str) -> None:
        self._request("POST", f"/jobs/{job_id}/start", {})

    def submit_result(
        self,
        job_id: str,
        status: JobStatus | str,
        result_data: Any = None,
        error_message: str | None = None,
    ) -> None:
        """
        Report a job's terminal state.

        Transport failures are retried; HTTP errors are not.
        """
        status = JobStatus(status)
        body: dict[str, Any] = {"status": status.value}
        if status is JobStatus.COMPLETED:
            body["result_data"] = result_data
        else:
            body["error_message"] = error_message

        post = retry_with_backoff(
            max_retries=self.submit_retries,
            base_delay=1.0,
            max_delay=10.0,
            retryable_exceptions=(ControlPlaneUnavailableError,),
            sleep=self._sleep,
        )(self._request)
        post("POST", f"/jobs/{job_id}/result", body)

    def send_heartbeat(
        self,
        current_capacity: int,
        max_capacity: int,
        active_jobs: int,
        system_info: dict[str, Any],
    ) -> None:
        self._request("POST", "/heartbeat", {
            "current_capacity": current_capacity,
            "max_capacity": max_capacity,
            "active_jobs": active_jobs,
            "system_info": system_info,
        })

    def register(self, project_id: str, agent_name: str, capacity: int = 5) -> dict[str, Any]:
        """
        Register a new agent and return the issued credentials.

        Returns:
            Response body, containing agent_id and api_key on success

        Raises:
            ControlPlaneError: Registration rejected
        """
        body = self._request("POST", "/register", {
            "projectId": project_id,
            "agentName": agent_name,
            "agentType": "etl",
            "capacity": capacity,
        }) or {}
        if not body.get("success", True) or not body.get("api_key"):
            raise ControlPlaneError(
                f"Registration failed: {body.get('error') or 'no api_key returned'}"
            )
        return body

    def close(self) -> None:
        self.session.close()
