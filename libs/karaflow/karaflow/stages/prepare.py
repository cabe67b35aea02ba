"""Input preparation stages: library init, lyrics, source audio, language."""

from __future__ import annotations

import logging

from karaflow.exceptions import InputError
from karaflow.models.modes import MediaMode
from karaflow.models.outcome import StageOutcome
from karaflow.pipeline.context import WorkflowContext
from karaflow.stages.base import Stage

logger = logging.getLogger(__name__)


class InitializeStage(Stage):
    name = "initialize"

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        self.status_sink(context)("Initializing")
        await self.services.library.init(context["item"])
        return context, StageOutcome.completed()


class LyricsStage(Stage):
    name = "lyrics"

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        item = context["item"]
        self.status_sink(context)("Searching lyrics")
        lyrics = await self.services.library.get_lyrics(item, item.title)
        context["lyrics"] = lyrics or None
        if not lyrics:
            logger.info("no lyrics found (item_id=%s, title=%s)", item.id, item.title)
        return context, StageOutcome.completed()


class SourceAudioStage(Stage):
    """Download the original audio and stage it for the processing backend."""

    name = "source_audio"

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        item = context["item"]
        notify = self.status_sink(context)

        notify("Downloading audio")
        audio = await self.services.library.get_audio(item, MediaMode.ORIGINAL)
        if not audio:
            raise InputError("Can't find audio")

        notify("Uploading files")
        context["audio_url"] = await self.services.transfer.upload(audio)
        return context, StageOutcome.completed()


class LanguageStage(Stage):
    """Detect the lyrics language and stage the lyrics text."""

    name = "language"

    def skip_reason(self, context: WorkflowContext) -> str | None:
        if not context.get("lyrics"):
            return "no lyrics"
        return None

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        item = context["item"]
        lyrics = str(context["lyrics"])
        lang = await self.services.library.get_language(item, lyrics)
        logger.info("language resolved (item_id=%s, lang=%s)", item.id, lang)
        context["language"] = lang
        context["transcript_url"] = await self.services.transfer.upload(lyrics)
        return context, StageOutcome.completed()
