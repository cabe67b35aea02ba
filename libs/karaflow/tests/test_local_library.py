from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from karaflow.library.local import LocalContentLibrary
from karaflow.models.item import Item
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode
from karaflow.utils.subprocess import RunResult


class _Source:
    def __init__(self, lyrics: dict[str | None, str | None] | None = None) -> None:
        self.lyrics = lyrics or {}
        self.searches: list[str | None] = []
        self.downloads: list[str] = []

    async def download_audio(self, item_id: str, dest: Path) -> None:
        self.downloads.append("audio")
        dest.write_bytes(b"original-audio")

    async def download_video(self, item_id: str, dest: Path) -> None:
        self.downloads.append("video")
        dest.write_bytes(b"original-video")

    async def fetch_info(self, item_id: str) -> dict[str, Any]:
        return {"id": item_id, "duration": 215}

    async def search_lyrics(self, item_id: str, title: str | None) -> str | None:  # noqa: ARG002
        self.searches.append(title)
        return self.lyrics.get(title)


@pytest.mark.asyncio
async def test_save_file_and_read_alignments(tmp_path) -> None:
    library = LocalContentLibrary(str(tmp_path))
    item = Item(id="abc123")

    path = await library.save_file(item, CaptionMode.LINE, FileFormat.JSON, json.dumps([{"text": "hola"}]))

    assert path == str(tmp_path / "abc123" / "line.json")
    assert await library.get_alignments(item, CaptionMode.LINE) == [{"text": "hola"}]
    assert await library.get_alignments(item, CaptionMode.WORD) is None


@pytest.mark.asyncio
async def test_unreadable_alignments_are_treated_as_missing(tmp_path) -> None:
    library = LocalContentLibrary(str(tmp_path))
    item = Item(id="abc123")
    await library.save_file(item, CaptionMode.LINE, FileFormat.JSON, "{not json")
    assert await library.get_alignments(item, CaptionMode.LINE) is None


@pytest.mark.asyncio
async def test_get_lyrics_searches_again_for_new_title(tmp_path) -> None:
    source = _Source({"Song": "first lyrics", "Song (Live)": "live lyrics"})
    library = LocalContentLibrary(str(tmp_path), source=source)
    item = Item(id="abc123")

    assert await library.get_lyrics(item, "Song") == "first lyrics"
    assert await library.get_lyrics(item, "Song") == "first lyrics"
    assert await library.get_lyrics(item, "Song (Live)") == "live lyrics"
    assert await library.get_lyrics(item) == "live lyrics"
    assert source.searches == ["Song", "Song (Live)"]


@pytest.mark.asyncio
async def test_get_lyrics_without_source_or_match(tmp_path) -> None:
    assert await LocalContentLibrary(str(tmp_path)).get_lyrics(Item(id="x"), "Song") is None
    library = LocalContentLibrary(str(tmp_path), source=_Source())
    assert await library.get_lyrics(Item(id="x"), "Unknown") is None


@pytest.mark.asyncio
async def test_get_lyrics_does_not_fall_back_to_previous_title(tmp_path) -> None:
    source = _Source({"Song": "first lyrics"})
    library = LocalContentLibrary(str(tmp_path), source=source)
    item = Item(id="abc123")

    assert await library.get_lyrics(item, "Song") == "first lyrics"
    assert await library.get_lyrics(item, "Song (Corrected)") is None
    assert source.searches == ["Song", "Song (Corrected)"]


@pytest.mark.asyncio
async def test_get_lyrics_keeps_untitled_cached_lyrics(tmp_path) -> None:
    (tmp_path / "abc123").mkdir()
    (tmp_path / "abc123" / "lyrics.txt").write_text("placed by hand", encoding="utf-8")
    library = LocalContentLibrary(str(tmp_path), source=_Source())

    assert await library.get_lyrics(Item(id="abc123"), "Song") == "placed by hand"


@pytest.mark.asyncio
async def test_get_language_caches_and_force_redetects(tmp_path) -> None:
    detected: list[str] = []

    def _detect(text: str) -> str:
        detected.append(text)
        return "ES" if "hola" in text else "en"

    library = LocalContentLibrary(str(tmp_path), detect_language=_detect)
    item = Item(id="abc123")

    assert await library.get_language(item, "hola amigo") == "es"
    assert await library.get_language(item, "hello friend") == "es"
    assert await library.get_language(item, "hello friend", force=True) == "en"
    assert await library.get_language(item) == "en"
    assert detected == ["hola amigo", "hello friend"]


@pytest.mark.asyncio
async def test_get_language_accepts_async_detector(tmp_path) -> None:
    async def _detect(text: str) -> str | None:  # noqa: ARG001
        return None

    library = LocalContentLibrary(str(tmp_path), detect_language=_detect)
    assert await library.get_language(Item(id="abc123"), "???") is None
    assert await library.get_language(Item(id="abc123"), force=True) is None


@pytest.mark.asyncio
async def test_original_media_is_downloaded_once(tmp_path) -> None:
    source = _Source()
    library = LocalContentLibrary(str(tmp_path), source=source)
    item = Item(id="abc123")
    await library.init(item)

    assert await library.get_audio(item, MediaMode.ORIGINAL) == b"original-audio"
    assert await library.get_audio(item, MediaMode.ORIGINAL) == b"original-audio"
    assert await library.get_audio(item, MediaMode.VOCALS) is None
    assert await library.get_info(item) == {"id": "abc123", "duration": 215}
    assert json.loads((tmp_path / "abc123" / "info.json").read_text(encoding="utf-8"))["duration"] == 215
    assert source.downloads == ["audio"]


@pytest.mark.asyncio
async def test_separated_videos_are_muxed_from_original(tmp_path, monkeypatch) -> None:
    calls: list[tuple[Path, Path, Path]] = []

    async def _fake_replace(video, audio, out, *, ffmpeg_bin, timeout_s):  # noqa: ANN001, ARG001
        calls.append((Path(video), Path(audio), Path(out)))
        Path(out).write_bytes(b"muxed:" + Path(audio).read_bytes())
        return Path(out)

    monkeypatch.setattr("karaflow.library.local.replace_audio_track", _fake_replace)
    library = LocalContentLibrary(str(tmp_path), source=_Source())
    item = Item(id="abc123")

    assert await library.get_video(item, MediaMode.INSTRUMENTS) is None
    assert calls == []

    await library.save_file(item, MediaMode.INSTRUMENTS, FileFormat.M4A, b"inst")
    assert await library.get_video(item, MediaMode.INSTRUMENTS) == b"muxed:inst"
    assert await library.get_video(item, MediaMode.INSTRUMENTS) == b"muxed:inst"

    root = tmp_path / "abc123"
    assert calls == [(root / "original.mp4", root / "instruments.m4a", root / "instruments.mp4")]


@pytest.mark.asyncio
async def test_failed_mux_leaves_no_video_behind(tmp_path, monkeypatch) -> None:
    outputs = iter([(1, b"TRUNCATED"), (0, b"GOOD")])

    async def _fake_run(args, *, timeout_s=None):  # noqa: ANN001, ARG001
        returncode, body = next(outputs)
        Path(args[-1]).write_bytes(body)
        return RunResult(returncode=returncode, stdout=b"", stderr=b"moov atom not found")

    monkeypatch.setattr("karaflow.utils.ffmpeg.run_subprocess", _fake_run)
    library = LocalContentLibrary(str(tmp_path), source=_Source())
    item = Item(id="abc123")
    await library.save_file(item, MediaMode.INSTRUMENTS, FileFormat.M4A, b"inst")

    with pytest.raises(RuntimeError, match="moov atom"):
        await library.get_video(item, MediaMode.INSTRUMENTS)
    assert sorted(p.name for p in (tmp_path / "abc123").glob("instruments*")) == ["instruments.m4a"]

    assert await library.get_video(item, MediaMode.INSTRUMENTS) == b"GOOD"
