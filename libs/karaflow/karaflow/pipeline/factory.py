"""Orchestrator factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from karaflow.config import Settings
from karaflow.library.base import ContentLibrary
from karaflow.library.local import LocalContentLibrary
from karaflow.pipeline.orchestrator import Orchestrator
from karaflow.providers.registry import get_queue_client, get_transfer_client
from karaflow.services.fetcher import ResilientFetcher

if TYPE_CHECKING:
    from redis.asyncio import Redis


def create_library(settings: Settings) -> LocalContentLibrary:
    return LocalContentLibrary(
        settings.library.root_dir,
        ffmpeg_bin=settings.library.ffmpeg_bin,
        ffmpeg_timeout_s=settings.library.ffmpeg_timeout_s,
    )


def create_orchestrator(
    settings: Settings,
    library: ContentLibrary | None = None,
    *,
    redis: "Redis | None" = None,
) -> Orchestrator:
    """Wire an orchestrator from settings; `library` defaults to the local store."""
    transfer = get_transfer_client(settings)
    queue = get_queue_client(settings, redis=redis)
    fetcher = ResilientFetcher.from_config(transfer, settings.fetch_retry)
    return Orchestrator(
        library=library or create_library(settings),
        transfer=transfer,
        queue=queue,
        fetcher=fetcher,
    )
