"""Queue client abstractions."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from karaflow.exceptions import QueueError
from karaflow.models.job import Job, JobState
from karaflow.models.status import StatusSink, noop_status

logger = logging.getLogger(__name__)


def describe_job(job: Job) -> str:
    """Human-readable status line for a job in flight."""
    if job.state == JobState.WAITING:
        return "Waiting in queue"
    if job.progress is not None:
        return f"Processing ({max(0, min(100, int(job.progress)))}%)"
    return "Processing"


class QueueClient(ABC):
    """Submits jobs to named queues and waits for them to finish.

    Subclasses implement `enqueue` and `get_job`; `wait` polls `get_job` until
    the job is terminal. Failed jobs are returned, not raised: callers decide
    whether a missing result is fatal. Up to `max_poll_errors` consecutive
    `QueueError`s while polling are tolerated; the next one is raised.
    """

    poll_interval_s: float = 1.0
    wait_timeout_s: float | None = None
    max_poll_errors: int = 5

    @abstractmethod
    async def enqueue(self, queue: str, params: dict[str, Any]) -> str:
        """Submit a job and return its id."""

    @abstractmethod
    async def get_job(self, queue: str, job_id: str) -> Job | None:
        """Return the current job snapshot, or None if the queue does not know it."""

    async def wait(self, queue: str, job_id: str, on_status: StatusSink | None = None) -> Job:
        notify = on_status or noop_status
        started = time.monotonic()
        last_message: str | None = None
        poll_errors = 0

        while True:
            try:
                job = await self.get_job(queue, job_id)
                poll_errors = 0
            except QueueError as exc:
                poll_errors += 1
                if poll_errors > int(self.max_poll_errors):
                    raise
                logger.warning(
                    "queue poll failed (queue=%s, job_id=%s, attempt=%d, error=%s)",
                    queue,
                    job_id,
                    poll_errors,
                    exc,
                )
                job = None
            else:
                if job is None:
                    raise QueueError(queue, "job not found", job_id=job_id)

                if job.state.is_terminal:
                    if job.state == JobState.FAILED:
                        logger.warning(
                            "job failed (queue=%s, job_id=%s, error=%s)", queue, job_id, job.error
                        )
                    else:
                        logger.info("job completed (queue=%s, job_id=%s)", queue, job_id)
                    return job

                message = describe_job(job)
                if message != last_message:
                    notify(message)
                    last_message = message

            if self.wait_timeout_s is not None and time.monotonic() - started >= float(self.wait_timeout_s):
                raise QueueError(queue, f"timed out after {self.wait_timeout_s}s", job_id=job_id)
            await asyncio.sleep(max(0.0, float(self.poll_interval_s)))

    async def close(self) -> None:  # pragma: no cover
        return None
