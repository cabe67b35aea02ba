"""Redis-backed queue client.

Jobs are stored as JSON under `{prefix}:job:{id}` and their ids pushed onto
`{prefix}:queue:{queue}`; processing workers update the job record in place.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from redis.asyncio import Redis
from redis.exceptions import RedisError

from karaflow.exceptions import QueueError
from karaflow.models.job import Job, JobState
from karaflow.providers.queue.base import QueueClient

logger = logging.getLogger(__name__)


class RedisQueueClient(QueueClient):
    def __init__(
        self,
        redis: Redis,
        *,
        prefix: str = "karaflow",
        poll_interval_s: float = 1.0,
        wait_timeout_s: float | None = None,
        ttl_s: int = 7 * 24 * 3600,
    ) -> None:
        self.redis = redis
        self.prefix = prefix
        self.poll_interval_s = poll_interval_s
        self.wait_timeout_s = wait_timeout_s
        self.ttl_s = ttl_s

    def _job_key(self, job_id: str) -> str:
        return f"{self.prefix}:job:{job_id}"

    def _queue_key(self, queue: str) -> str:
        return f"{self.prefix}:queue:{queue}"

    async def enqueue(self, queue: str, params: dict[str, Any]) -> str:
        job_id = uuid4().hex
        now = datetime.now(tz=timezone.utc).isoformat()
        job = {
            "id": job_id,
            "queue": queue,
            "state": JobState.WAITING.value,
            "params": params,
            "progress": None,
            "result": None,
            "error": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            await self.redis.set(self._job_key(job_id), json.dumps(job), ex=self.ttl_s)
            await self.redis.lpush(self._queue_key(queue), job_id)
        except RedisError as exc:
            raise QueueError(queue, f"enqueue failed: {exc}") from exc
        logger.info("job enqueued (queue=%s, job_id=%s)", queue, job_id)
        return job_id

    async def get_job(self, queue: str, job_id: str) -> Job | None:
        try:
            raw = await self.redis.get(self._job_key(job_id))
        except RedisError as exc:
            raise QueueError(queue, f"poll failed: {exc}", job_id=job_id) from exc
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise QueueError(queue, "job record is not valid JSON", job_id=job_id) from exc
        return Job.from_dict(data, queue=queue)
