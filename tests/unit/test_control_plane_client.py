"""
Unit tests for src/agent/client.py

The requests session is mocked; tests check URLs, headers, bodies and
the mapping of HTTP and transport failures to agent errors.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock, Mock

import pytest
import requests

from src.agent.client import AGENT_KEY_HEADER, ControlPlaneClient
from src.agent.jobs import JobStatus
from src.utils.exceptions import (
    AuthenticationError,
    ControlPlaneError,
    ControlPlaneUnavailableError,
)

BASE_URL = "http://cp.local/functions/v1/etl-api"


def make_response(status_code=200, body=None, text=None):
    response = Mock()
    response.status_code = status_code
    response.reason = "Reason"
    if body is None and text is None:
        response.content = b""
        response.json.side_effect = ValueError("no body")
        response.text = ""
    elif body is not None:
        response.content = json.dumps(body).encode()
        response.json.return_value = body
        response.text = json.dumps(body)
    else:
        response.content = text.encode()
        response.json.side_effect = ValueError("not json")
        response.text = text
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return ControlPlaneClient(BASE_URL + "/", "agent-key", timeout=5, session=session, sleep=Mock())


def sent_body(session, index=-1):
    data = session.request.call_args_list[index].kwargs["data"]
    return json.loads(data) if data else None


class TestRequests:
    """Test request construction"""

    def test_headers(self, client, session):
        assert session.headers[AGENT_KEY_HEADER] == "agent-key"
        assert session.headers["Content-Type"] == "application/json"

    def test_poll_jobs(self, client, session):
        session.request.return_value = make_response(body={
            "jobs": [
                {"id": "j1", "job_type": "test_connection", "payload": "{}"},
                {"id": "j2", "job_type": "fetch_metadata", "payload": {}},
            ],
            "agent_id": "agent-7",
        })

        result = client.poll_jobs()

        session.request.assert_called_once_with(
            "GET", f"{BASE_URL}/jobs/poll", data=None, timeout=5
        )
        assert [job.id for job in result.jobs] == ["j1", "j2"]
        assert result.agent_id == "agent-7"

    def test_poll_empty(self, client, session):
        session.request.return_value = make_response(body={"jobs": []})
        assert client.poll_jobs().jobs == []

    def test_start_job(self, client, session):
        session.request.return_value = make_response()

        client.start_job("j1")

        assert session.request.call_args.args == ("POST", f"{BASE_URL}/jobs/j1/start")
        assert sent_body(session) == {}

    def test_submit_completed(self, client, session):
        session.request.return_value = make_response(body={"ok": True})

        client.submit_result("j1", JobStatus.COMPLETED, result_data={"success": True})

        assert session.request.call_args.args == ("POST", f"{BASE_URL}/jobs/j1/result")
        assert sent_body(session) == {"status": "completed", "result_data": {"success": True}}

    def test_submit_failed(self, client, session):
        session.request.return_value = make_response()

        client.submit_result("j1", "failed", error_message="Unknown job type: foo")

        assert sent_body(session) == {"status": "failed", "error_message": "Unknown job type: foo"}

    def test_heartbeat_body(self, client, session):
        session.request.return_value = make_response()

        client.send_heartbeat(0, 1, 1, {"agentType": "etl"})

        assert sent_body(session) == {
            "current_capacity": 0,
            "max_capacity": 1,
            "active_jobs": 1,
            "system_info": {"agentType": "etl"},
        }

    def test_non_json_values_serialized(self, client, session):
        session.request.return_value = make_response()

        client.submit_result("j1", JobStatus.COMPLETED, result_data={"amount": Decimal("2.5")})

        assert sent_body(session)["result_data"] == {"amount": "2.5"}


class TestErrors:
    """Test error mapping"""

    def test_401_is_authentication_error(self, client, session):
        session.request.return_value = make_response(401, body={"error": "Invalid agent key"})

        with pytest.raises(AuthenticationError) as exc_info:
            client.poll_jobs()

        assert exc_info.value.status_code == 401
        assert "Invalid agent key" in str(exc_info.value)

    def test_500_is_control_plane_error(self, client, session):
        session.request.return_value = make_response(500, text="boom")

        with pytest.raises(ControlPlaneError) as exc_info:
            client.start_job("j1")

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, AuthenticationError)

    @pytest.mark.parametrize("body", [["not", "an", "object"], "queued", {"jobs": {"id": "j1"}}])
    def test_malformed_poll_body_is_control_plane_error(self, client, session, body):
        session.request.return_value = make_response(body=body)

        with pytest.raises(ControlPlaneError) as exc_info:
            client.poll_jobs()

        assert "Unexpected poll response" in str(exc_info.value)

    def test_connection_error_is_unavailable(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ControlPlaneUnavailableError):
            client.poll_jobs()

    def test_submit_retries_transport_failures(self, client, session):
        session.request.side_effect = [
            requests.Timeout("slow"),
            requests.ConnectionError("reset"),
            make_response(),
        ]

        client.submit_result("j1", JobStatus.FAILED, error_message="x")

        assert session.request.call_count == 3
        assert client._sleep.call_count == 2

    def test_submit_gives_up_after_retries(self, client, session):
        session.request.side_effect = requests.ConnectionError("down")

        with pytest.raises(ControlPlaneUnavailableError):
            client.submit_result("j1", JobStatus.FAILED, error_message="x")

        assert session.request.call_count == 3

    def test_submit_does_not_retry_http_errors(self, client, session):
        session.request.return_value = make_response(400, body={"error": "bad status"})

        with pytest.raises(ControlPlaneError):
            client.submit_result("j1", JobStatus.COMPLETED, result_data={})

        assert session.request.call_count == 1


class TestRegister:
    """Test agent registration"""

    def test_register(self, session):
        session.request.return_value = make_response(body={
            "success": True, "agent_id": "a1", "api_key": "k1",
        })
        client = ControlPlaneClient(BASE_URL, session=session)

        body = client.register("proj", "agent-01")

        assert AGENT_KEY_HEADER not in session.headers
        assert sent_body(session) == {
            "projectId": "proj", "agentName": "agent-01", "agentType": "etl", "capacity": 5,
        }
        assert body["api_key"] == "k1"

    def test_register_rejected(self, session):
        session.request.return_value = make_response(body={"success": False, "error": "no project"})
        client = ControlPlaneClient(BASE_URL, session=session)

        with pytest.raises(ControlPlaneError) as exc_info:
            client.register("proj", "agent-01")

        assert "no project" in str(exc_info.value)
