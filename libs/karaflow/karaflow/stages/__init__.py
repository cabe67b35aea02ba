"""Workflow stages."""

from karaflow.stages.alignment import AlignmentStage
from karaflow.stages.base import Stage
from karaflow.stages.prepare import InitializeStage, LanguageStage, LyricsStage, SourceAudioStage
from karaflow.stages.separation import SeparationStage
from karaflow.stages.video import KaraokeVideoStage

__all__ = [
    "AlignmentStage",
    "InitializeStage",
    "KaraokeVideoStage",
    "LanguageStage",
    "LyricsStage",
    "SeparationStage",
    "SourceAudioStage",
    "Stage",
]
