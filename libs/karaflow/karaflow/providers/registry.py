"""Provider factory and registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from karaflow.config import Settings
from karaflow.exceptions import ConfigurationError
from karaflow.providers.queue.base import QueueClient
from karaflow.providers.transfer.base import TransferClient

if TYPE_CHECKING:
    from redis.asyncio import Redis


def get_queue_client(settings: Settings, *, redis: "Redis | None" = None) -> QueueClient:
    """Get the queue client selected by `QUEUE_BACKEND`."""
    cfg = settings.queue
    backend = str(cfg.backend or "http").strip().lower()

    match backend:
        case "http":
            from karaflow.providers.queue.rest import HttpQueueClient

            return HttpQueueClient(
                base_url=cfg.base_url,
                api_key=cfg.api_key,
                poll_interval_s=float(cfg.poll_interval_s),
                wait_timeout_s=cfg.wait_timeout_s,
                timeout=float(cfg.request_timeout_s),
            )
        case "redis":
            from karaflow.providers.queue.redis_jobs import RedisQueueClient

            if redis is None:
                from redis.asyncio import Redis

                redis = Redis.from_url(settings.redis_url, decode_responses=True)
            return RedisQueueClient(
                redis,
                prefix=cfg.key_prefix,
                poll_interval_s=float(cfg.poll_interval_s),
                wait_timeout_s=cfg.wait_timeout_s,
                ttl_s=settings.redis_task_ttl_s,
            )
        case _:
            raise ConfigurationError(f"Unknown queue backend: {backend!r} (expected: http/redis)")


def get_transfer_client(settings: Settings) -> TransferClient:
    """Get the transfer client selected by `TRANSFER_BACKEND`."""
    cfg = settings.transfer
    backend = str(cfg.backend or "s3").strip().lower()

    match backend:
        case "s3":
            from karaflow.providers.transfer.s3 import S3TransferClient

            if not settings.s3_endpoint or not settings.s3_bucket_name:
                raise ConfigurationError("S3 transfer backend requires S3_ENDPOINT and S3_BUCKET_NAME")
            return S3TransferClient(
                endpoint=settings.s3_endpoint,
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key,
                bucket=settings.s3_bucket_name,
                prefix=cfg.upload_prefix,
                expires_in=int(cfg.presign_expires_s),
                timeout=float(cfg.request_timeout_s),
            )
        case "http":
            from karaflow.providers.transfer.rest import HttpTransferClient

            return HttpTransferClient(
                base_url=cfg.base_url,
                api_key=cfg.api_key,
                timeout=float(cfg.request_timeout_s),
            )
        case _:
            raise ConfigurationError(f"Unknown transfer backend: {backend!r} (expected: s3/http)")
