"""
Unit tests for src/agent/runtime.py

The control-plane client is a Mock; handlers are plain functions.
"""

from unittest.mock import Mock, patch

import pytest

from src.agent.handlers import build_handlers
from src.agent.jobs import Job, JobSlot, JobStatus, PollResult
from src.agent.runtime import MAX_CAPACITY, AgentRuntime
from src.utils.exceptions import (
    AuthenticationError,
    ControlPlaneError,
    ControlPlaneUnavailableError,
)
from src.utils.metrics.agent import AgentMetrics


@pytest.fixture
def client():
    client = Mock()
    client.poll_jobs.return_value = PollResult(jobs=[])
    return client


@pytest.fixture
def handlers():
    return {
        "test_connection": Mock(return_value={"success": True}),
        "fetch_metadata": Mock(side_effect=RuntimeError("catalog unreadable")),
    }


@pytest.fixture
def runtime(client, handlers):
    return AgentRuntime(client, handlers)


def queue(client, *jobs):
    client.poll_jobs.return_value = PollResult(jobs=list(jobs), agent_id="agent-1")


class TestPolling:
    """Test poll_once and poll_and_process"""

    def test_no_jobs(self, runtime, client):
        assert runtime.poll_once() is None
        assert runtime.slot.busy is False
        client.start_job.assert_not_called()

    def test_claims_first_job_only(self, runtime, client):
        queue(client, Job("j1", "test_connection"), Job("j2", "test_connection"))

        job = runtime.poll_once()

        assert job.id == "j1"
        assert runtime.slot.current_job_id == "j1"

    def test_busy_slot_skips_poll(self, runtime, client):
        runtime.slot.try_acquire("running")

        assert runtime.poll_once() is None
        client.poll_jobs.assert_not_called()

    def test_authentication_failure_logged(self, runtime, client, caplog):
        client.poll_jobs.side_effect = AuthenticationError("Invalid agent key", status_code=401)

        assert runtime.poll_once() is None
        assert "Check your AGENT_API_KEY" in caplog.text

    def test_transport_failure_logged(self, runtime, client, caplog):
        client.poll_jobs.side_effect = ControlPlaneUnavailableError("connection refused")

        assert runtime.poll_once() is None
        assert "[Poll] Error: connection refused" in caplog.text

    def test_poll_and_process_inline(self, runtime, client):
        queue(client, Job("j1", "test_connection", {"connection": {}}))

        job = runtime.poll_and_process()

        assert job.status is JobStatus.COMPLETED
        assert runtime.slot.busy is False

    def test_poll_and_process_submits_to_executor(self, runtime, client):
        queue(client, Job("j1", "test_connection"))
        submit = Mock()

        job = runtime.poll_and_process(submit=submit)

        submit.assert_called_once_with(runtime.run_claimed, job)
        # slot stays claimed until the executor runs the job
        assert runtime.slot.busy is True
        client.start_job.assert_not_called()


class TestProcessJob:
    """Test the received -> started -> completed | failed state machine"""

    def test_completed(self, runtime, client, handlers):
        job = Job("j1", "test_connection", {"connection": {"type": "sqlite"}})

        status = runtime.process_job(job)

        assert status is JobStatus.COMPLETED
        client.start_job.assert_called_once_with("j1")
        handlers["test_connection"].assert_called_once_with({"connection": {"type": "sqlite"}})
        client.submit_result.assert_called_once_with(
            "j1", JobStatus.COMPLETED, result_data={"success": True}
        )

    def test_start_precedes_result(self, runtime, client):
        runtime.process_job(Job("j1", "test_connection"))

        names = [c[0] for c in client.method_calls if c[0] in ("start_job", "submit_result")]
        assert names == ["start_job", "submit_result"]

    def test_unknown_job_type_fails_and_agent_continues(self, runtime, client):
        queue(client, Job("j9", "foo"))

        runtime.poll_and_process()

        client.start_job.assert_called_once_with("j9")
        client.submit_result.assert_called_once_with(
            "j9", JobStatus.FAILED, error_message="Unknown job type: foo"
        )
        assert runtime.slot.busy is False

        queue(client, Job("j10", "test_connection"))
        assert runtime.poll_and_process().status is JobStatus.COMPLETED

    def test_handler_error_reported(self, runtime, client):
        status = runtime.process_job(Job("j2", "fetch_metadata"))

        assert status is JobStatus.FAILED
        client.submit_result.assert_called_once_with(
            "j2", JobStatus.FAILED, error_message="catalog unreadable"
        )

    def test_empty_error_message_uses_exception_name(self, runtime, client, handlers):
        handlers["test_connection"].side_effect = KeyError()

        runtime.process_job(Job("j3", "test_connection"))

        assert client.submit_result.call_args.kwargs["error_message"] == "KeyError"

    def test_start_failure_reported_as_failed(self, runtime, client, handlers):
        client.start_job.side_effect = ControlPlaneError("job already claimed", status_code=409)

        status = runtime.process_job(Job("j4", "test_connection"))

        assert status is JobStatus.FAILED
        handlers["test_connection"].assert_not_called()
        client.submit_result.assert_called_once_with(
            "j4", JobStatus.FAILED, error_message="job already claimed"
        )

    def test_completed_submit_failure_falls_back_to_failed(self, runtime, client):
        client.submit_result.side_effect = [ControlPlaneError("payload too large"), None]

        status = runtime.process_job(Job("j5", "test_connection"))

        assert status is JobStatus.FAILED
        assert client.submit_result.call_args.args == ("j5", JobStatus.FAILED)

    def test_failed_submit_failure_is_logged(self, runtime, client, caplog):
        client.submit_result.side_effect = ControlPlaneUnavailableError("down")

        status = runtime.process_job(Job("j6", "fetch_metadata"))

        assert status is JobStatus.FAILED
        assert "[Job j6] Failed to submit error: down" in caplog.text

    def test_slot_released_after_failure(self, runtime, client):
        client.start_job.side_effect = ControlPlaneError("boom")
        runtime.slot.try_acquire("j7")

        runtime.run_claimed(Job("j7", "test_connection"))

        assert runtime.slot.busy is False

    def test_metrics_recorded(self, client, handlers, registry):
        metrics = AgentMetrics(registry=registry)
        runtime = AgentRuntime(client, handlers, metrics=metrics)
        queue(client, Job("j1", "test_connection"))

        runtime.poll_and_process()

        assert registry.get_sample_value(
            "agent_jobs_total", {"job_type": "test_connection", "status": "completed"}
        ) == 1.0
        assert registry.get_sample_value("agent_polls_total", {"outcome": "jobs"}) == 1.0
        assert registry.get_sample_value("agent_busy") == 0.0

    def test_real_dispatch_table(self, client):
        runtime = AgentRuntime(client, build_handlers())

        runtime.process_job(Job("j1", "test_connection", {}))

        client.submit_result.assert_called_once_with(
            "j1",
            JobStatus.COMPLETED,
            result_data={"success": False, "error": "Job payload has no 'connection' object"},
        )


class TestHeartbeat:
    """Test heartbeat capacity reporting"""

    @patch("src.agent.runtime.collect_system_info", return_value={"agentType": "etl"})
    def test_idle_capacity(self, mock_info, runtime, client):
        assert runtime.send_heartbeat() is True

        client.send_heartbeat.assert_called_once_with(
            current_capacity=MAX_CAPACITY,
            max_capacity=MAX_CAPACITY,
            active_jobs=0,
            system_info={"agentType": "etl"},
        )

    @patch("src.agent.runtime.collect_system_info", return_value={})
    def test_busy_capacity(self, mock_info, client, handlers):
        runtime = AgentRuntime(client, handlers, slot=JobSlot())
        runtime.slot.try_acquire("j1")

        runtime.send_heartbeat()

        kwargs = client.send_heartbeat.call_args.kwargs
        assert kwargs["current_capacity"] == 0
        assert kwargs["active_jobs"] == 1

    @patch("src.agent.runtime.collect_system_info", return_value={})
    def test_failure_logged_not_raised(self, mock_info, runtime, client, caplog):
        client.send_heartbeat.side_effect = ControlPlaneUnavailableError("timeout")

        assert runtime.send_heartbeat() is False
        assert "[Heartbeat] Failed: timeout" in caplog.text
