"""Pipeline executor."""

from __future__ import annotations

import logging
import time

from karaflow.exceptions import StageExecutionError
from karaflow.models.outcome import StageOutcome
from karaflow.pipeline.context import WorkflowContext
from karaflow.stages.base import Stage

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """Runs stages in order, recording one outcome per stage."""

    def __init__(self, stages: list[Stage]):
        self.stages = stages

    async def run(self, initial_context: WorkflowContext) -> WorkflowContext:
        context: WorkflowContext = dict(initial_context)  # type: ignore[assignment]
        outcomes = context.setdefault("outcomes", {})
        item = context.get("item")
        item_id = item.id if item is not None else None

        for stage in self.stages:
            reason = stage.skip_reason(context)
            if reason:
                logger.info("stage skipped (item_id=%s, stage=%s, reason=%s)", item_id, stage.name, reason)
                outcomes[stage.name] = StageOutcome.skipped(reason)
                continue
            if not stage.validate_input(context):
                raise StageExecutionError(stage.name, "input validation failed", item_id=item_id)

            started = time.monotonic()
            context, outcome = await stage.execute(context)
            outcomes = context.setdefault("outcomes", outcomes)
            outcomes[stage.name] = outcome
            logger.info(
                "stage finished (item_id=%s, stage=%s, status=%s, duration_ms=%d)",
                item_id,
                stage.name,
                outcome.status.value,
                int((time.monotonic() - started) * 1000),
            )
        return context
