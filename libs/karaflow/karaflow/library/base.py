"""Content library interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from karaflow.models.item import Item
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode, ProcessingMode


class ContentLibrary(ABC):
    """Supplies workflow inputs and persists derived artifacts for an item.

    Artifact naming belongs to the implementation; callers only pass
    (item, mode, format).
    """

    @abstractmethod
    async def init(self, item: Item) -> None:
        """Prepare per-item state."""

    @abstractmethod
    async def get_lyrics(self, item: Item, title: str | None = None) -> str | None:
        """Return lyrics text, or None when none can be found."""

    @abstractmethod
    async def get_language(self, item: Item, text: str | None = None, force: bool = False) -> str | None:
        """Return the item's language code, re-detecting from `text` when `force` is set."""

    @abstractmethod
    async def get_audio(self, item: Item, mode: MediaMode) -> bytes | None:
        """Return audio bytes for `mode`, or None when unavailable."""

    @abstractmethod
    async def get_video(self, item: Item, mode: MediaMode) -> bytes | None:
        """Return video bytes for `mode`, or None when unavailable."""

    @abstractmethod
    async def get_info(self, item: Item) -> dict[str, Any]:
        """Return item metadata."""

    @abstractmethod
    async def get_alignments(self, item: Item, mode: CaptionMode) -> list[Any] | None:
        """Return a persisted alignment record, or None."""

    @abstractmethod
    async def save_file(self, item: Item, mode: ProcessingMode, fmt: FileFormat, payload: bytes | str) -> str:
        """Persist an artifact and return its location."""
