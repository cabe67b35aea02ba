"""Core data models for Karaflow."""

from karaflow.models.item import Item
from karaflow.models.job import Job, JobState
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode, ProcessingMode, parse_mode
from karaflow.models.outcome import OutcomeStatus, StageOutcome
from karaflow.models.status import StatusSink, noop_status

__all__ = [
    "CaptionMode",
    "FileFormat",
    "Item",
    "Job",
    "JobState",
    "MediaMode",
    "OutcomeStatus",
    "ProcessingMode",
    "StageOutcome",
    "StatusSink",
    "noop_status",
    "parse_mode",
]
