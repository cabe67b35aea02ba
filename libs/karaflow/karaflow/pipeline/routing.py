"""Queue routing policy."""

from __future__ import annotations

from enum import Enum

from karaflow.languages import is_english
from karaflow.models.modes import CaptionMode, MediaMode, ProcessingMode


class QueueName(str, Enum):
    ALIGN = "align"
    ALIGN_EN = "align_en"
    ALIGN_LINE = "align_line"
    SPLIT = "split"


def route_queue(lang: str | None, mode: ProcessingMode) -> QueueName:
    """Pick the queue for a job producing `mode` from audio in `lang`."""
    if isinstance(mode, CaptionMode):
        if mode == CaptionMode.WORD and is_english(lang):
            return QueueName.ALIGN_EN
        return QueueName.ALIGN
    if isinstance(mode, MediaMode):
        return QueueName.SPLIT
    raise ValueError(f"Unroutable mode: {mode!r}")


def route_realign(lang: str | None) -> tuple[QueueName, MediaMode]:
    """Queue and source audio for a from-scratch realignment.

    English aligns against the original mix on the English queue regardless of
    the target caption mode; everything else aligns against isolated vocals.
    """
    if is_english(lang):
        return QueueName.ALIGN_EN, MediaMode.ORIGINAL
    return QueueName.ALIGN, MediaMode.VOCALS
