"""Caption alignment stage (against separated vocals)."""

from __future__ import annotations

import asyncio

from karaflow.languages import is_english, is_supported
from karaflow.models.modes import CaptionMode
from karaflow.models.outcome import OutcomeStatus, StageOutcome
from karaflow.pipeline import jobs
from karaflow.pipeline.context import WorkflowContext
from karaflow.stages.base import Stage


class AlignmentStage(Stage):
    """Line captions always, word captions unless English already took the fast path."""

    name = "alignment"

    def skip_reason(self, context: WorkflowContext) -> str | None:
        if not context.get("lyrics"):
            return "no lyrics"
        lang = context.get("language")
        if not lang:
            return "language not detected"
        if not is_supported(lang):
            return f"unsupported language: {lang}"
        return None

    def validate_input(self, context: WorkflowContext) -> bool:
        return (
            context.get("item") is not None
            and bool(context.get("vocals_url"))
            and bool(context.get("transcript_url"))
        )

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        item = context["item"]
        lang = context.get("language")
        modes = [CaptionMode.LINE]
        if not is_english(lang):
            modes.append(CaptionMode.WORD)

        outcomes = await asyncio.gather(
            *(
                jobs.align(
                    self.services,
                    item,
                    str(context["vocals_url"]),
                    str(context["transcript_url"]),
                    lang,
                    mode,
                    self.status_sink(context),
                )
                for mode in modes
            )
        )

        captions = context.setdefault("captions", {})
        for mode, outcome in zip(modes, outcomes):
            captions[mode] = outcome

        persisted = [m for m, o in zip(modes, outcomes) if o.status == OutcomeStatus.PERSISTED]
        if persisted:
            return context, StageOutcome.persisted(*persisted)
        failed = next(o for o in outcomes if o.status == OutcomeStatus.FAILED)
        return context, failed
