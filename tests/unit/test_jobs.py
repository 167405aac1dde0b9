"""
Unit tests for src/agent/jobs.py
"""

import threading

import pytest

from src.agent.jobs import Job, JobSlot, JobStatus, JobType
from src.utils.exceptions import ConfigurationError, ControlPlaneError


class TestJob:
    """Test job parsing and payload decoding"""

    def test_from_dict(self):
        job = Job.from_dict({"id": 42, "job_type": "test_connection", "payload": {"connection": {}}})

        assert job.id == "42"
        assert job.job_type == JobType.TEST_CONNECTION.value
        assert job.status is JobStatus.PENDING

    def test_unknown_type_survives_parsing(self):
        assert Job.from_dict({"id": "1", "job_type": "foo"}).job_type == "foo"

    @pytest.mark.parametrize("data", [{}, {"id": ""}, "job", None])
    def test_malformed_entry(self, data):
        with pytest.raises(ControlPlaneError):
            Job.from_dict(data)

    def test_json_string_payload_decoded(self):
        job = Job("1", "fetch_metadata", '{"connection": {"type": "sqlite"}}')
        assert job.decoded_payload() == {"connection": {"type": "sqlite"}}

    def test_missing_payload_is_empty(self):
        assert Job("1", "fetch_metadata").decoded_payload() == {}

    @pytest.mark.parametrize("payload", ["{oops", "[1, 2]", 7])
    def test_bad_payload(self, payload):
        with pytest.raises(ConfigurationError):
            Job("1", "fetch_metadata", payload).decoded_payload()


class TestJobSlot:
    """Test the single job slot"""

    def test_acquire_and_release(self):
        slot = JobSlot()

        assert slot.try_acquire("a") is True
        assert slot.busy is True
        assert slot.current_job_id == "a"
        assert slot.try_acquire("b") is False

        slot.release()

        assert slot.busy is False
        assert slot.try_acquire("b") is True

    def test_only_one_thread_wins(self):
        slot = JobSlot()
        results = []
        barrier = threading.Barrier(8)

        def claim(n):
            barrier.wait()
            results.append(slot.try_acquire(str(n)))

        threads = [threading.Thread(target=claim, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
