"""Workflow context typing.

Stages share a context dict; this module lists the known keys and the bundle
of collaborators every stage receives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict

from karaflow.library.base import ContentLibrary
from karaflow.models.item import Item
from karaflow.models.job import Job
from karaflow.models.modes import CaptionMode
from karaflow.models.outcome import StageOutcome
from karaflow.models.status import StatusSink
from karaflow.providers.queue.base import QueueClient
from karaflow.providers.transfer.base import TransferClient
from karaflow.services.fetcher import ResilientFetcher


@dataclass(frozen=True)
class Services:
    library: ContentLibrary
    transfer: TransferClient
    queue: QueueClient
    fetcher: ResilientFetcher


class WorkflowContext(TypedDict, total=False):
    item: Item
    on_status: StatusSink

    lyrics: str | None
    language: str | None
    audio_url: str
    transcript_url: str | None

    split_job: Job
    vocals_url: str
    info: dict[str, Any]

    captions: dict[CaptionMode, StageOutcome]
    outcomes: dict[str, StageOutcome]
