"""
Agent runtime: poll, claim, process, report.

Two periodic tasks drive an AgentRuntime: poll_once() on the poll
interval and send_heartbeat() on the heartbeat interval. They share
only the JobSlot, so a heartbeat is never blocked by a running job and
a poll that finds the slot taken is skipped rather than queued.
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from src.utils.exceptions import AuthenticationError, ControlPlaneError
from src.utils.logging import ContextLogger
from src.utils.metrics.agent import AgentMetrics
from src.utils.tracing import trace_job

from .client import ControlPlaneClient
from .handlers import Handler, dispatch
from .heartbeat import collect_system_info
from .jobs import Job, JobSlot, JobStatus

logger = logging.getLogger(__name__)

MAX_CAPACITY = 1


class AgentRuntime:
    """
    Job state machine: received -> started -> completed | failed.

    Args:
        client: Control-plane client
        handlers: Dispatch table from build_handlers()
        slot: Shared single-job slot
        metrics: Optional agent metrics
    """

    def __init__(
        self,
        client: ControlPlaneClient,
        handlers: Mapping[str, Handler],
        slot: JobSlot | None = None,
        metrics: AgentMetrics | None = None,
    ):
        self.client = client
        self.handlers = handlers
        self.slot = slot or JobSlot()
        self.metrics = metrics

    def _record_poll(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_poll(outcome)

    def _set_busy(self, busy: bool) -> None:
        if self.metrics:
            self.metrics.set_busy(busy)

    def poll_once(self) -> Job | None:
        """
        Poll the control plane and claim at most one job.

        Returns:
            The claimed job, or None when busy, idle or the poll failed.
            The caller must pass a claimed job to run_claimed().
        """
        if self.slot.busy:
            logger.info("[Poll] Already processing a job, skipping poll")
            self._record_poll("skipped")
            return None

        try:
            result = self.client.poll_jobs()
        except AuthenticationError:
            logger.error("[Poll] Authentication failed. Check your AGENT_API_KEY.")
            self._record_poll("auth_failed")
            return None
        except ControlPlaneError as e:
            logger.error(f"[Poll] Error: {e}")
            self._record_poll("error")
            return None

        if result.agent_id:
            logger.debug(f"[Poll] Agent id: {result.agent_id}")

        if not result.jobs:
            self._record_poll("empty")
            return None

        self._record_poll("jobs")
        job = result.jobs[0]
        if len(result.jobs) > 1:
            logger.debug(f"[Poll] {len(result.jobs)} jobs pending, taking {job.id}")

        if not self.slot.try_acquire(job.id):
            logger.info("[Poll] Already processing a job, skipping poll")
            return None

        self._set_busy(True)
        logger.info(f"[Poll] Found job: {job.id} ({job.job_type})")
        return job

    def run_claimed(self, job: Job) -> JobStatus:
        """Process a job claimed by poll_once() and free the slot."""
        try:
            return self.process_job(job)
        finally:
            self.slot.release()
            self._set_busy(False)

    def poll_and_process(self, submit: Callable[..., Any] | None = None) -> Job | None:
        """
        One poll tick. The claimed job runs inline, or through submit(fn, job)
        when an executor is supplied.
        """
        job = self.poll_once()
        if job is not None:
            if submit is None:
                self.run_claimed(job)
            else:
                submit(self.run_claimed, job)
        return job

    @trace_job
    def process_job(self, job: Job) -> JobStatus:
        """
        Start, dispatch and report one job.

        Never raises: any error from start, the handler or the completed
        submission turns into a failed result.
        """
        log = ContextLogger(__name__, job_id=job.id, job_type=job.job_type)
        started_at = time.monotonic()
        log.info(f"[Job {job.id}] Processing {job.job_type}")

        try:
            self.client.start_job(job.id)
            job.status = JobStatus.STARTED

            result = dispatch(job, self.handlers)

            self.client.submit_result(job.id, JobStatus.COMPLETED, result_data=result)
            job.status = JobStatus.COMPLETED
            log.info(f"[Job {job.id}] Completed successfully")
        except Exception as e:
            job.status = JobStatus.FAILED
            message = str(e) or type(e).__name__
            log.error(f"[Job {job.id}] Failed: {message}")

            try:
                self.client.submit_result(job.id, JobStatus.FAILED, error_message=message)
            except Exception as submit_error:
                log.error(f"[Job {job.id}] Failed to submit error: {submit_error}")
        finally:
            if self.metrics:
                self.metrics.record_job(
                    job.job_type or "unknown",
                    job.status.value,
                    time.monotonic() - started_at,
                )

        return job.status

    def send_heartbeat(self) -> bool:
        """Report capacity; 0 while a job holds the slot, 1 otherwise."""
        busy = self.slot.busy
        try:
            self.client.send_heartbeat(
                current_capacity=0 if busy else MAX_CAPACITY,
                max_capacity=MAX_CAPACITY,
                active_jobs=1 if busy else 0,
                system_info=collect_system_info(),
            )
        except ControlPlaneError as e:
            logger.error(f"[Heartbeat] Failed: {e}")
            if self.metrics:
                self.metrics.record_heartbeat(False)
            return False

        logger.info("[Heartbeat] Sent successfully")
        if self.metrics:
            self.metrics.record_heartbeat(True)
        return True
