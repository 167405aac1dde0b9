"""
APScheduler-based agent scheduler.

Runs the poll and heartbeat tasks on independent interval triggers. Jobs
claimed by a poll run on a dedicated single worker so the poll trigger
keeps firing (and skipping) while a job is in flight.
"""

import logging
import signal
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .runtime import AgentRuntime

logger = logging.getLogger(__name__)

POLL_JOB_ID = "poll"
HEARTBEAT_JOB_ID = "heartbeat"


class AgentScheduler:
    """
    Scheduler for the agent's two periodic tasks.

    Args:
        runtime: The runtime to drive
        poll_interval: Seconds between polls
        heartbeat_interval: Seconds between heartbeats
        scheduler: Optional scheduler instance (tests pass a mock)
    """

    def __init__(
        self,
        runtime: AgentRuntime,
        poll_interval: float,
        heartbeat_interval: float,
        scheduler: BlockingScheduler | None = None,
    ):
        self.runtime = runtime
        self.poll_interval = poll_interval
        self.heartbeat_interval = heartbeat_interval
        self.scheduler = scheduler or BlockingScheduler()
        self.worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="etl-job")
        self._configured = False

    def _poll(self) -> None:
        self.runtime.poll_and_process(submit=self.worker.submit)

    def configure(self) -> None:
        """Register both tasks, each due immediately and then on its interval."""
        if self._configured:
            return
        now = datetime.now()

        self.scheduler.add_job(
            self._poll,
            trigger=IntervalTrigger(seconds=self.poll_interval),
            id=POLL_JOB_ID,
            name="Poll for jobs",
            max_instances=1,
            coalesce=True,
            next_run_time=now,
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.runtime.send_heartbeat,
            trigger=IntervalTrigger(seconds=self.heartbeat_interval),
            id=HEARTBEAT_JOB_ID,
            name="Heartbeat",
            max_instances=1,
            coalesce=True,
            next_run_time=now,
            replace_existing=True,
        )
        self._configured = True
        logger.info(
            f"[Agent] Polling every {self.poll_interval:g}s, "
            f"heartbeat every {self.heartbeat_interval:g}s"
        )

    def install_signal_handlers(self) -> None:
        def _handle(signum, frame):
            logger.info(f"[Agent] Received signal {signum}, shutting down...")
            self.stop(wait=False)

        signal.signal(signal.SIGINT, _handle)
        signal.signal(signal.SIGTERM, _handle)

    def start(self) -> None:
        """
        Start the scheduler.

        Blocks the current thread until stop() is called or a signal
        arrives.
        """
        self.configure()
        logger.info("[Agent] Starting job polling...")

        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("[Agent] Scheduler stopped by user")
            self.stop()

    def stop(self, wait: bool = True) -> None:
        """Stop both tasks; with wait=True, let the running job finish first."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.worker.shutdown(wait=wait)
        logger.info("[Agent] Scheduler stopped")

    def list_jobs(self) -> list[dict[str, Any]]:
        job_list = []

        for job in self.scheduler.get_jobs():
            job_list.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            })

        return job_list
