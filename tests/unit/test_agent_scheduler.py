"""
Unit tests for src/agent/scheduler.py

The APScheduler instance is a MagicMock; tests check how the two
periodic tasks are registered and how shutdown is propagated.
"""

import signal
from unittest.mock import MagicMock, Mock, patch

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from src.agent.scheduler import HEARTBEAT_JOB_ID, POLL_JOB_ID, AgentScheduler


@pytest.fixture
def runtime():
    return Mock()


@pytest.fixture
def scheduler():
    scheduler = MagicMock()
    scheduler.running = False
    return scheduler


@pytest.fixture
def agent_scheduler(runtime, scheduler):
    agent_scheduler = AgentScheduler(runtime, poll_interval=5, heartbeat_interval=60, scheduler=scheduler)
    yield agent_scheduler
    agent_scheduler.worker.shutdown(wait=True)


def added_jobs(scheduler):
    return {c.kwargs["id"]: c for c in scheduler.add_job.call_args_list}


class TestConfigure:
    """Test task registration"""

    def test_registers_poll_and_heartbeat(self, agent_scheduler, scheduler, runtime):
        agent_scheduler.configure()

        jobs = added_jobs(scheduler)
        assert set(jobs) == {POLL_JOB_ID, HEARTBEAT_JOB_ID}

        poll = jobs[POLL_JOB_ID]
        assert poll.args[0] == agent_scheduler._poll
        assert isinstance(poll.kwargs["trigger"], IntervalTrigger)
        assert poll.kwargs["trigger"].interval.total_seconds() == 5
        assert poll.kwargs["max_instances"] == 1
        assert poll.kwargs["coalesce"] is True
        assert poll.kwargs["next_run_time"] is not None

        heartbeat = jobs[HEARTBEAT_JOB_ID]
        assert heartbeat.args[0] == runtime.send_heartbeat
        assert heartbeat.kwargs["trigger"].interval.total_seconds() == 60

    def test_configure_is_idempotent(self, agent_scheduler, scheduler):
        agent_scheduler.configure()
        agent_scheduler.configure()

        assert scheduler.add_job.call_count == 2

    def test_poll_hands_jobs_to_worker(self, agent_scheduler, runtime):
        agent_scheduler._poll()

        runtime.poll_and_process.assert_called_once_with(submit=agent_scheduler.worker.submit)


class TestLifecycle:
    """Test start and stop"""

    def test_start_configures_and_blocks(self, agent_scheduler, scheduler):
        agent_scheduler.start()

        assert scheduler.add_job.call_count == 2
        scheduler.start.assert_called_once()

    def test_keyboard_interrupt_stops(self, agent_scheduler, scheduler):
        scheduler.start.side_effect = KeyboardInterrupt
        scheduler.running = True

        agent_scheduler.start()

        scheduler.shutdown.assert_called_once_with(wait=False)

    def test_stop_when_not_running(self, agent_scheduler, scheduler):
        agent_scheduler.stop()

        scheduler.shutdown.assert_not_called()

    def test_stop_waits_for_running_job(self, agent_scheduler, scheduler):
        scheduler.running = True
        finished = []
        agent_scheduler.worker.submit(lambda: finished.append(True))

        agent_scheduler.stop(wait=True)

        assert finished == [True]

    @patch("src.agent.scheduler.signal.signal")
    def test_signal_handlers(self, mock_signal, agent_scheduler, scheduler):
        agent_scheduler.install_signal_handlers()

        installed = {c.args[0]: c.args[1] for c in mock_signal.call_args_list}
        assert set(installed) == {signal.SIGINT, signal.SIGTERM}

        scheduler.running = True
        installed[signal.SIGTERM](signal.SIGTERM, None)
        scheduler.shutdown.assert_called_once_with(wait=False)


class TestListJobs:
    def test_list_jobs(self, agent_scheduler, scheduler):
        job = Mock(id=POLL_JOB_ID, next_run_time=None, trigger="interval[0:00:05]")
        job.name = "Poll for jobs"
        scheduler.get_jobs.return_value = [job]

        assert agent_scheduler.list_jobs() == [{
            "id": POLL_JOB_ID,
            "name": "Poll for jobs",
            "next_run_time": None,
            "trigger": "interval[0:00:05]",
        }]
