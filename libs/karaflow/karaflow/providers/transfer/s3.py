"""S3/MinIO transfer client: uploads objects and hands out presigned URLs."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import uuid4

import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from karaflow.exceptions import TransferError
from karaflow.providers.transfer.base import HttpFetchMixin, TransferClient, as_bytes

logger = logging.getLogger(__name__)


class S3TransferClient(HttpFetchMixin, TransferClient):
    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        *,
        prefix: str = "uploads",
        expires_in: int = 24 * 3600,
        timeout: float = 300.0,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.access_key = access_key
        self.secret_key = secret_key
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.expires_in = max(1, int(expires_in))
        self.timeout = timeout
        self._s3: Any | None = None
        self._client: httpx.AsyncClient | None = None

    def _ensure_s3(self) -> Any:
        if self._s3 is not None:
            return self._s3

        import boto3

        self._s3 = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            config=Config(s3={"addressing_style": "path"}),
        )
        return self._s3

    def _key(self) -> str:
        name = uuid4().hex
        return f"{self.prefix}/{name}" if self.prefix else name

    async def upload(self, payload: bytes | str) -> str:
        body = as_bytes(payload)
        s3 = self._ensure_s3()
        key = self._key()

        def _put_and_sign() -> str:
            s3.put_object(Bucket=self.bucket, Key=key, Body=body)
            return str(
                s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": key},
                    ExpiresIn=self.expires_in,
                )
            )

        try:
            url = await asyncio.to_thread(_put_and_sign)
        except (BotoCoreError, ClientError) as exc:
            raise TransferError(f"upload to s3://{self.bucket}/{key} failed: {exc}") from exc
        logger.debug("uploaded payload (bytes=%d, key=%s)", len(body), key)
        return url
