"""HTTP queue client for the remote processing backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from karaflow.exceptions import QueueError
from karaflow.models.job import Job
from karaflow.providers.queue.base import QueueClient

logger = logging.getLogger(__name__)


class HttpQueueClient(QueueClient):
    """`POST {base_url}/queue/{queue}` to enqueue, `GET {base_url}/queue/{queue}/{id}` to poll."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        *,
        poll_interval_s: float = 1.0,
        wait_timeout_s: float | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.poll_interval_s = poll_interval_s
        self.wait_timeout_s = wait_timeout_s
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def enqueue(self, queue: str, params: dict[str, Any]) -> str:
        client = await self._get_client()
        try:
            response = await client.post(f"{self.base_url}/queue/{queue}", json=params, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise QueueError(queue, f"enqueue failed: {exc}") from exc

        job_id = str((data or {}).get("id") or "").strip() if isinstance(data, dict) else ""
        if not job_id:
            raise QueueError(queue, "enqueue response is missing id")
        logger.info("job enqueued (queue=%s, job_id=%s)", queue, job_id)
        return job_id

    async def get_job(self, queue: str, job_id: str) -> Job | None:
        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}/queue/{queue}/{job_id}", headers=self._headers())
        except httpx.HTTPError as exc:
            raise QueueError(queue, f"poll failed: {exc}", job_id=job_id) from exc
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise QueueError(queue, f"poll failed: HTTP {response.status_code}", job_id=job_id)
        try:
            data = response.json()
        except ValueError as exc:
            raise QueueError(queue, "poll returned a non-JSON response", job_id=job_id) from exc
        if not isinstance(data, dict):
            raise QueueError(queue, "poll returned an unexpected payload", job_id=job_id)
        data.setdefault("id", job_id)
        return Job.from_dict(data, queue=queue)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
