"""Filesystem-backed content library."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from karaflow.languages import normalize_lang
from karaflow.library.base import ContentLibrary
from karaflow.models.item import Item
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode, ProcessingMode
from karaflow.utils.ffmpeg import replace_audio_track

logger = logging.getLogger(__name__)

LanguageDetector = Callable[[str], Any]  # sync or async, returns a language code or None

_STATE_FILE = "state.json"
_INFO_FILE = "info.json"
_LYRICS_FILE = "lyrics.txt"


class MediaSource(Protocol):
    """Retrieves source material for an item (downloads, metadata, lyrics search)."""

    async def download_audio(self, item_id: str, dest: Path) -> None: ...

    async def download_video(self, item_id: str, dest: Path) -> None: ...

    async def fetch_info(self, item_id: str) -> dict[str, Any]: ...

    async def search_lyrics(self, item_id: str, title: str | None) -> str | None: ...


class LocalContentLibrary(ContentLibrary):
    """Stores every artifact as `{root}/{item_id}/{mode}.{format}`.

    Source material is pulled through an optional `MediaSource` the first time
    it is requested. Instrumental and vocal videos are derived on demand by
    muxing the separated audio into the original video.
    """

    def __init__(
        self,
        root_dir: str,
        *,
        source: MediaSource | None = None,
        detect_language: LanguageDetector | None = None,
        ffmpeg_bin: str = "ffmpeg",
        ffmpeg_timeout_s: float | None = None,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.source = source
        self.detect_language = detect_language
        self.ffmpeg_bin = ffmpeg_bin
        self.ffmpeg_timeout_s = ffmpeg_timeout_s

    def item_dir(self, item: Item) -> Path:
        safe_id = str(item.id).strip().replace("/", "_")
        return self.root_dir / safe_id

    def path(self, item: Item, mode: ProcessingMode, fmt: FileFormat) -> Path:
        return self.item_dir(item) / f"{mode.value}.{fmt.value}"

    def _read_state(self, item: Item) -> dict[str, Any]:
        p = self.item_dir(item) / _STATE_FILE
        if not p.exists():
            return {}
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("ignoring corrupt library state (item_id=%s)", item.id)
            return {}
        return data if isinstance(data, dict) else {}

    def _update_state(self, item: Item, **patch: Any) -> None:
        state = self._read_state(item)
        state.update(patch)
        p = self.item_dir(item) / _STATE_FILE
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(state, ensure_ascii=False, indent=2), encoding="utf-8")

    async def init(self, item: Item) -> None:
        self.item_dir(item).mkdir(parents=True, exist_ok=True)

    async def get_lyrics(self, item: Item, title: str | None = None) -> str | None:
        p = self.item_dir(item) / _LYRICS_FILE
        state = self._read_state(item)
        cached = p.read_text(encoding="utf-8") if p.exists() else None
        hint = str(title or "").strip() or None

        # A new title hint means the cached lyrics may belong to another song.
        cached_title = state.get("lyrics_title")
        needs_search = cached is None or (hint is not None and hint != cached_title)
        if needs_search and self.source is not None:
            found = await self.source.search_lyrics(item.id, hint)
            if found and found.strip():
                p.parent.mkdir(parents=True, exist_ok=True)
                p.write_text(found, encoding="utf-8")
                self._update_state(item, lyrics_title=hint)
                return found
        if hint is not None and cached_title is not None and hint != cached_title:
            logger.info("no lyrics for new title (item_id=%s, title=%s, cached_title=%s)", item.id, hint, cached_title)
            return None
        if cached is not None and cached.strip():
            return cached
        return None

    async def get_language(self, item: Item, text: str | None = None, force: bool = False) -> str | None:
        state = self._read_state(item)
        cached = normalize_lang(state.get("lang"))
        if cached and not force:
            return cached

        if text is None:
            lyrics_path = self.item_dir(item) / _LYRICS_FILE
            text = lyrics_path.read_text(encoding="utf-8") if lyrics_path.exists() else None
        if not text or self.detect_language is None:
            return None if force else cached

        detected = self.detect_language(text)
        if inspect.isawaitable(detected):
            detected = await detected
        lang = normalize_lang(detected)
        self._update_state(item, lang=lang)
        logger.info("language detected (item_id=%s, lang=%s, forced=%s)", item.id, lang, force)
        return lang

    async def get_audio(self, item: Item, mode: MediaMode) -> bytes | None:
        p = self.path(item, mode, FileFormat.M4A)
        if not p.exists() and mode == MediaMode.ORIGINAL and self.source is not None:
            p.parent.mkdir(parents=True, exist_ok=True)
            await self.source.download_audio(item.id, p)
        if not p.exists():
            return None
        return p.read_bytes()

    async def get_video(self, item: Item, mode: MediaMode) -> bytes | None:
        p = self.path(item, mode, FileFormat.MP4)
        if not p.exists():
            if mode == MediaMode.ORIGINAL:
                if self.source is not None:
                    p.parent.mkdir(parents=True, exist_ok=True)
                    await self.source.download_video(item.id, p)
            else:
                await self._derive_video(item, mode, p)
        if not p.exists():
            return None
        return p.read_bytes()

    async def _derive_video(self, item: Item, mode: MediaMode, dest: Path) -> None:
        audio = self.path(item, mode, FileFormat.M4A)
        if not audio.exists():
            logger.warning("cannot derive video without audio (item_id=%s, mode=%s)", item.id, mode.value)
            return
        if await self.get_video(item, MediaMode.ORIGINAL) is None:
            logger.warning("cannot derive video without original video (item_id=%s, mode=%s)", item.id, mode.value)
            return
        original = self.path(item, MediaMode.ORIGINAL, FileFormat.MP4)
        await replace_audio_track(
            original,
            audio,
            dest,
            ffmpeg_bin=self.ffmpeg_bin,
            timeout_s=self.ffmpeg_timeout_s,
        )

    async def get_info(self, item: Item) -> dict[str, Any]:
        p = self.item_dir(item) / _INFO_FILE
        if p.exists():
            data = json.loads(p.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
        if self.source is None:
            return {}
        info = dict(await self.source.fetch_info(item.id) or {})
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(info, ensure_ascii=False, indent=2), encoding="utf-8")
        return info

    async def get_alignments(self, item: Item, mode: CaptionMode) -> list[Any] | None:
        p = self.path(item, mode, FileFormat.JSON)
        if not p.exists():
            return None
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("ignoring unreadable alignments (item_id=%s, mode=%s)", item.id, mode.value)
            return None
        return data if isinstance(data, list) else None

    async def save_file(self, item: Item, mode: ProcessingMode, fmt: FileFormat, payload: bytes | str) -> str:
        p = self.path(item, mode, fmt)
        p.parent.mkdir(parents=True, exist_ok=True)
        data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        await asyncio.to_thread(p.write_bytes, data)
        logger.info("artifact saved (item_id=%s, mode=%s, format=%s, bytes=%d)", item.id, mode.value, fmt.value, len(data))
        return str(p)
