"""Tagged stage outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from karaflow.models.modes import ProcessingMode


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    PERSISTED = "persisted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StageOutcome:
    """Result of a stage or sub-workflow call.

    `FAILED` is only produced for tolerated failures; fatal errors propagate as
    exceptions instead.
    """

    status: OutcomeStatus
    modes: tuple[ProcessingMode, ...] = ()
    reason: str | None = None
    error: Exception | None = None

    @classmethod
    def completed(cls) -> "StageOutcome":
        return cls(status=OutcomeStatus.COMPLETED)

    @classmethod
    def persisted(cls, *modes: ProcessingMode) -> "StageOutcome":
        return cls(status=OutcomeStatus.PERSISTED, modes=tuple(modes))

    @classmethod
    def skipped(cls, reason: str) -> "StageOutcome":
        return cls(status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: Exception) -> "StageOutcome":
        return cls(status=OutcomeStatus.FAILED, reason=str(error), error=error)

    @property
    def is_persisted(self) -> bool:
        return self.status == OutcomeStatus.PERSISTED
