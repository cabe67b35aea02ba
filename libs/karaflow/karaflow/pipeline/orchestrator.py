"""Karaoke workflow orchestrator."""

from __future__ import annotations

import json
import logging

from karaflow.exceptions import InputError, SyncError
from karaflow.library.base import ContentLibrary
from karaflow.models.item import Item
from karaflow.models.job import Job
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode, ProcessingMode
from karaflow.models.outcome import StageOutcome
from karaflow.models.status import StatusSink, noop_status
from karaflow.pipeline import jobs
from karaflow.pipeline.context import Services, WorkflowContext
from karaflow.pipeline.executor import PipelineExecutor
from karaflow.pipeline.routing import QueueName, route_realign
from karaflow.providers.queue.base import QueueClient
from karaflow.providers.transfer.base import TransferClient
from karaflow.services.fetcher import ResilientFetcher
from karaflow.stages import (
    AlignmentStage,
    InitializeStage,
    KaraokeVideoStage,
    LanguageStage,
    LyricsStage,
    SeparationStage,
    SourceAudioStage,
    Stage,
)

logger = logging.getLogger(__name__)


class Orchestrator:
    """Sequences remote separation and alignment jobs for a single item.

    Entry workflows:
    - `generate`: full artifact set from scratch.
    - `alignline`: word captions re-synced from persisted line captions.
    - `realign`: one caption mode re-aligned from freshly searched lyrics.

    Collaborators are injected; nothing here keeps per-run state, so one
    instance can serve concurrent runs for different items.
    """

    def __init__(
        self,
        library: ContentLibrary,
        transfer: TransferClient,
        queue: QueueClient,
        fetcher: ResilientFetcher | None = None,
    ) -> None:
        self.services = Services(
            library=library,
            transfer=transfer,
            queue=queue,
            fetcher=fetcher or ResilientFetcher(transfer),
        )

    @property
    def library(self) -> ContentLibrary:
        return self.services.library

    def generation_stages(self) -> list[Stage]:
        return [
            InitializeStage(self.services),
            LyricsStage(self.services),
            SourceAudioStage(self.services),
            LanguageStage(self.services),
            SeparationStage(self.services),
            AlignmentStage(self.services),
            KaraokeVideoStage(self.services),
        ]

    async def generate(self, item: Item, on_status: StatusSink | None = None) -> WorkflowContext:
        """Produce separated tracks, videos and (when possible) captions for `item`.

        Missing lyrics or an unsupported language prune the caption stages
        without failing the run. Separation failures are fatal; an alignment
        job without a result only leaves its caption mode unproduced.
        """
        logger.info("generate started (item_id=%s, title=%s)", item.id, item.title)
        executor = PipelineExecutor(self.generation_stages())
        context = await executor.run({"item": item, "on_status": on_status or noop_status})
        logger.info(
            "generate finished (item_id=%s, lang=%s, captions=%s)",
            item.id,
            context.get("language"),
            {m.value: o.status.value for m, o in (context.get("captions") or {}).items()},
        )
        return context

    async def align(
        self,
        item: Item,
        audio_url: str,
        transcript_url: str,
        lang: str | None,
        mode: CaptionMode,
        on_status: StatusSink | None = None,
    ) -> StageOutcome:
        return await jobs.align(self.services, item, audio_url, transcript_url, lang, mode, on_status)

    async def split(self, item: Item, audio_url: str, on_status: StatusSink | None = None) -> Job:
        return await jobs.split(self.services, item, audio_url, on_status)

    async def alignline(self, item: Item, on_status: StatusSink | None = None) -> StageOutcome:
        """Derive word captions from the persisted line captions."""
        notify = on_status or noop_status
        library = self.library

        alignments = await library.get_alignments(item, CaptionMode.LINE)
        if not alignments:
            raise InputError("Line level sync not found")
        lang = await library.get_language(item)
        if not lang:
            raise InputError("Can't detect language")
        audio = await library.get_audio(item, MediaMode.VOCALS)
        if not audio:
            raise InputError("Can't find vocals")

        notify("Uploading files")
        audio_url = await self.services.transfer.upload(audio)
        alignments_url = await self.services.transfer.upload(json.dumps(alignments, ensure_ascii=False))

        params = jobs.alignment_params(audio_url, lang, alignments_url=alignments_url)
        job = await jobs.submit_and_wait(self.services, QueueName.ALIGN_LINE, params, notify)
        url = job.alignments_url
        if not url:
            raise SyncError("Sync failed")

        # Inputs were validated up front; the download is treated as terminal.
        word_alignments = await self.services.fetcher.fetch_text(url, retry=False)
        await library.save_file(item, CaptionMode.WORD, FileFormat.JSON, word_alignments)
        logger.info("alignline finished (item_id=%s, lang=%s, job_id=%s)", item.id, lang, job.id)
        return StageOutcome.persisted(CaptionMode.WORD)

    async def realign(
        self,
        item: Item,
        mode: ProcessingMode,
        on_status: StatusSink | None = None,
    ) -> StageOutcome:
        """Re-run alignment for `mode`, re-searching lyrics with `item.title`."""
        if not isinstance(mode, CaptionMode):
            raise InputError(f"Can't realign {mode.value}")
        notify = on_status or noop_status
        library = self.library

        lyrics = await library.get_lyrics(item, item.title)
        if not lyrics:
            raise InputError("Lyrics is empty")
        lang = await library.get_language(item, lyrics, force=True)
        if not lang:
            raise InputError("Can't detect language")

        queue, audio_mode = route_realign(lang)
        audio = await library.get_audio(item, audio_mode)
        if not audio:
            raise InputError(f"Can't find {audio_mode.value} audio")

        notify("Uploading files")
        audio_url = await self.services.transfer.upload(audio)
        transcript_url = await self.services.transfer.upload(lyrics)

        params = jobs.alignment_params(audio_url, lang, transcript_url=transcript_url, mode=mode)
        job = await jobs.submit_and_wait(self.services, queue, params, notify)
        url = job.alignments_url
        if not url:
            raise SyncError("Sync failed")

        alignments = await self.services.fetcher.fetch_text(url)
        await library.save_file(item, mode, FileFormat.JSON, alignments)
        logger.info(
            "realign finished (item_id=%s, mode=%s, lang=%s, queue=%s)", item.id, mode.value, lang, queue.value
        )
        return StageOutcome.persisted(mode)
