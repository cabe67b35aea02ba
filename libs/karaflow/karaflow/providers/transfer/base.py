"""Transfer client abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

import httpx

from karaflow.exceptions import TransferError, TransientTransferError


class PayloadEncoding(str, Enum):
    TEXT = "utf-8"
    BINARY = "binary"


class TransferClient(ABC):
    """Stages payloads in transient storage and fetches result payloads."""

    @abstractmethod
    async def upload(self, payload: bytes | str) -> str:
        """Upload a payload and return a URL the queue backend can fetch."""

    @abstractmethod
    async def fetch(self, url: str, encoding: PayloadEncoding) -> bytes | str:
        """Fetch a payload once (str for TEXT, bytes for BINARY).

        Raises `TransientTransferError` for transport-level failures and
        `TransferError` for responses that are reachable but unusable.
        """

    async def close(self) -> None:  # pragma: no cover
        return None


def as_bytes(payload: bytes | str) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def decode_text(body: bytes, url: str) -> str:
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TransferError("fetch returned a non-UTF-8 payload", url=url) from exc


class HttpFetchMixin:
    """Shared httpx-based `fetch` used by the concrete transfer clients."""

    timeout: float
    _client: httpx.AsyncClient | None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), follow_redirects=True)
        return self._client

    async def fetch(self, url: str, encoding: PayloadEncoding) -> bytes | str:
        client = await self._get_client()
        try:
            response = await client.get(url)
        except httpx.TransportError as exc:
            raise TransientTransferError(f"fetch failed: {exc}", url=url) from exc

        if response.status_code == 429 or response.status_code >= 500:
            raise TransientTransferError(f"fetch failed: HTTP {response.status_code}", url=url)
        if response.status_code >= 400:
            raise TransferError(f"fetch failed: HTTP {response.status_code}", url=url)

        body = response.content
        if not body:
            raise TransferError("fetch returned an empty payload", url=url)
        if encoding == PayloadEncoding.TEXT:
            return decode_text(body, url)
        return body

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
