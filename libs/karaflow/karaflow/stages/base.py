"""Stage abstractions for workflow execution."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from karaflow.models.outcome import StageOutcome
from karaflow.models.status import StatusSink, noop_status

if TYPE_CHECKING:
    from karaflow.pipeline.context import Services, WorkflowContext


class Stage(ABC):
    """One named step of a workflow."""

    name: str

    def __init__(self, services: "Services") -> None:
        self.services = services

    @abstractmethod
    async def execute(self, context: "WorkflowContext") -> tuple["WorkflowContext", StageOutcome]:
        """Run the stage, returning the updated context and its outcome."""

    def validate_input(self, context: "WorkflowContext") -> bool:
        """Whether the context holds everything this stage needs."""
        return context.get("item") is not None

    def skip_reason(self, context: "WorkflowContext") -> str | None:
        """A reason to skip this stage, or None to run it."""
        return None

    @staticmethod
    def status_sink(context: "WorkflowContext") -> StatusSink:
        return context.get("on_status") or noop_status
