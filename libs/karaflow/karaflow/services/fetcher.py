"""Resilient result fetching.

Job results live on storage owned by the processing backend, which is less
reliable than the inputs we manage ourselves. Every result download goes
through `ResilientFetcher` so transient transport failures are retried with
bounded exponential backoff while application-level errors surface at once.
"""

from __future__ import annotations

import logging

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from karaflow.config import FetchRetryConfig
from karaflow.exceptions import TransientTransferError
from karaflow.providers.transfer.base import PayloadEncoding, TransferClient, decode_text

logger = logging.getLogger(__name__)


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    url = getattr(exc, "url", None)
    wait_s = state.next_action.sleep if state.next_action else None
    logger.warning(
        "fetch retrying (url=%s, attempt=%s, wait_s=%s, error=%s)",
        url,
        state.attempt_number,
        wait_s,
        exc,
    )


class ResilientFetcher:
    def __init__(
        self,
        transfer: TransferClient,
        *,
        max_attempts: int = 5,
        wait_min_s: float = 1.0,
        wait_max_s: float = 10.0,
        multiplier: float = 1.0,
    ) -> None:
        self.transfer = transfer
        self.max_attempts = max(1, int(max_attempts))
        self.wait_min_s = float(wait_min_s)
        self.wait_max_s = float(wait_max_s)
        self.multiplier = float(multiplier)

    @classmethod
    def from_config(cls, transfer: TransferClient, config: FetchRetryConfig) -> "ResilientFetcher":
        return cls(
            transfer,
            max_attempts=int(config.max_attempts),
            wait_min_s=float(config.wait_min_s),
            wait_max_s=float(config.wait_max_s),
            multiplier=float(config.multiplier),
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(TransientTransferError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.multiplier, min=self.wait_min_s, max=self.wait_max_s),
            before_sleep=_log_retry,
            reraise=True,
        )

    async def fetch(self, url: str, encoding: PayloadEncoding, *, retry: bool = True) -> bytes | str:
        """Fetch a job result payload.

        With `retry=False` the transfer client is called exactly once; this is
        reserved for call sites that treat the download as terminal.
        """
        if not retry:
            return await self.transfer.fetch(url, encoding)

        async for attempt in self._retrying():
            with attempt:
                return await self.transfer.fetch(url, encoding)
        raise AssertionError("unreachable")  # pragma: no cover

    async def fetch_text(self, url: str, *, retry: bool = True) -> str:
        payload = await self.fetch(url, PayloadEncoding.TEXT, retry=retry)
        return payload if isinstance(payload, str) else decode_text(payload, url)

    async def fetch_bytes(self, url: str, *, retry: bool = True) -> bytes:
        payload = await self.fetch(url, PayloadEncoding.BINARY, retry=retry)
        return payload if isinstance(payload, bytes) else payload.encode("utf-8")
