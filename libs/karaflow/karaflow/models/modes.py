"""Processing modes and file formats."""

from __future__ import annotations

from enum import Enum
from typing import Union


class MediaMode(str, Enum):
    ORIGINAL = "original"
    INSTRUMENTS = "instruments"
    VOCALS = "vocals"


class CaptionMode(str, Enum):
    WORD = "word"
    LINE = "line"


class FileFormat(str, Enum):
    JSON = "json"
    M4A = "m4a"
    MP4 = "mp4"


ProcessingMode = Union[MediaMode, CaptionMode]


def parse_mode(value: str) -> ProcessingMode:
    """Parse a mode tag such as ``"vocals"`` or ``"line"``."""
    raw = str(value or "").strip().lower()
    for enum_cls in (MediaMode, CaptionMode):
        try:
            return enum_cls(raw)
        except ValueError:
            continue
    raise ValueError(f"Unknown processing mode: {value!r}")
