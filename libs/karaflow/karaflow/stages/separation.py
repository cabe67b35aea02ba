"""Source separation fan-out stage."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any

from karaflow.languages import is_english
from karaflow.models.modes import CaptionMode, MediaMode
from karaflow.models.outcome import StageOutcome
from karaflow.pipeline import jobs
from karaflow.pipeline.context import WorkflowContext
from karaflow.stages.base import Stage


class SeparationStage(Stage):
    """Split the original audio while fetching everything that does not need it.

    Runs concurrently: separation, original video, metadata and, for English
    lyrics, word alignment against the original mix (it does not need isolated
    vocals, so it starts before separation finishes).
    """

    name = "separation"

    def validate_input(self, context: WorkflowContext) -> bool:
        return context.get("item") is not None and bool(context.get("audio_url"))

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        item = context["item"]
        notify = self.status_sink(context)
        audio_url = str(context["audio_url"])
        library = self.services.library

        tasks: list[Awaitable[Any]] = [
            jobs.split(self.services, item, audio_url, notify),
            library.get_video(item, MediaMode.ORIGINAL),
            library.get_info(item),
        ]
        lyrics = context.get("lyrics")
        lang = context.get("language")
        fast_path = bool(lyrics) and is_english(lang) and bool(context.get("transcript_url"))
        if fast_path:
            tasks.append(
                jobs.align(
                    self.services,
                    item,
                    audio_url,
                    str(context["transcript_url"]),
                    lang,
                    CaptionMode.WORD,
                    notify,
                )
            )

        results = await asyncio.gather(*tasks)
        split_job, _video, info = results[0], results[1], results[2]
        context["split_job"] = split_job
        context["vocals_url"] = str(split_job.vocals_url)
        context["info"] = dict(info or {})
        if fast_path:
            context.setdefault("captions", {})[CaptionMode.WORD] = results[3]

        return context, StageOutcome.persisted(MediaMode.INSTRUMENTS, MediaMode.VOCALS)
