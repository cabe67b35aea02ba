"""Karaoke video stage."""

from __future__ import annotations

from karaflow.models.modes import MediaMode
from karaflow.models.outcome import StageOutcome
from karaflow.pipeline.context import WorkflowContext
from karaflow.stages.base import Stage


class KaraokeVideoStage(Stage):
    """Materialize instrumental and vocal videos; needs separated audio persisted first."""

    name = "karaoke_video"

    async def execute(self, context: WorkflowContext) -> tuple[WorkflowContext, StageOutcome]:
        item = context["item"]
        await self.services.library.get_video(item, MediaMode.INSTRUMENTS)
        await self.services.library.get_video(item, MediaMode.VOCALS)
        return context, StageOutcome.completed()
