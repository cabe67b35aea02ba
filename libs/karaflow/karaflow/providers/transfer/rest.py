"""HTTP transfer client backed by the processing backend's upload endpoint."""

from __future__ import annotations

import logging

import httpx

from karaflow.exceptions import TransferError, TransientTransferError
from karaflow.providers.transfer.base import HttpFetchMixin, TransferClient, as_bytes

logger = logging.getLogger(__name__)


class HttpTransferClient(HttpFetchMixin, TransferClient):
    """Uploads raw bodies to `POST {base_url}/upload` and returns the issued URL."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 300.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/octet-stream"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def upload(self, payload: bytes | str) -> str:
        body = as_bytes(payload)
        client = await self._get_client()
        try:
            response = await client.post(f"{self.base_url}/upload", content=body, headers=self._headers())
        except httpx.TransportError as exc:
            raise TransientTransferError(f"upload failed: {exc}") from exc
        if response.status_code >= 400:
            raise TransferError(f"upload failed: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise TransferError("upload returned a non-JSON response") from exc
        url = str((data or {}).get("url") or "").strip() if isinstance(data, dict) else ""
        if not url:
            raise TransferError("upload response is missing url")
        logger.debug("uploaded payload (bytes=%d, url=%s)", len(body), url)
        return url
